"""
Command Line Interface for derivative generation.
"""

import argparse
import logging
import os
from typing import List, Optional

import urllib3

from .batch import BatchDeriver
from .config import CurrentUser, DerivativeConfig
from .datastream import OBJ, ControlGroup
from .derivatives import KINDS, DerivativeGenerator
from .local_client import LocalConfig, LocalObjectStore
from .mime_registry import MimeRegistry
from .object_store import ObjectNotFoundError, ObjectStoreError
from .reporter import Reporter
from .s3_client import S3ObjectStore
from .s3_config import S3Config
from .temp_files import TempFileService


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('derivgen')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_prefix', None):
        config.prefix = args.s3_prefix
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_derivative_config(args: argparse.Namespace) -> DerivativeConfig:
    """
    Get derivative settings from environment and CLI overrides.

    Raises:
        ValueError: If an environment value cannot be parsed
    """
    config = DerivativeConfig.from_env()
    if getattr(args, 'upscale', None) is not None:
        config.upscale_images = args.upscale
    if getattr(args, 'tmp_folder', None):
        config.tmp_folder = args.tmp_folder
    return config


def load_derivative_config(args: argparse.Namespace, logger: logging.Logger) -> Optional[DerivativeConfig]:
    """Load and validate derivative settings, logging any problems."""
    try:
        config = get_derivative_config(args)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return None

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return None
    return config


def get_store(args: argparse.Namespace, logger: logging.Logger):
    """
    Get the object store selected by the arguments.

    Raises:
        ValueError: If the storage configuration is invalid
    """
    local_root = getattr(args, 'local_root', None)

    if local_root:
        config = LocalConfig(root_path=local_root, prefix=args.local_prefix or 'objects')
        errors = config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("Local configuration invalid")
        logger.info(f"Storage: Local filesystem ({config.objects_path})")
        return LocalObjectStore(config, logger)

    config = get_s3_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        raise ValueError("S3 configuration invalid")
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    logger.info(f"Storage: S3 {config.endpoint} ({config.bucket}/{config.prefix})")
    return S3ObjectStore(config, logger=logger)


def build_generator(store, config: DerivativeConfig, logger: logging.Logger) -> DerivativeGenerator:
    """Wire a DerivativeGenerator with its collaborators."""
    temp_files = TempFileService(config.tmp_folder, CurrentUser(), logger=logger)
    return DerivativeGenerator(store, temp_files, config=config, logger=logger)


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage configuration arguments to a parser."""
    local_group = parser.add_argument_group('Local Storage')
    local_group.add_argument('--local-root', metavar='PATH',
                             help='Use local filesystem instead of S3')
    local_group.add_argument('--local-prefix', default='objects',
                             help='Prefix within local root (default: objects)')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-prefix', help='Override S3_PREFIX')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')


def add_derivative_arguments(parser: argparse.ArgumentParser) -> None:
    """Add derivative settings arguments to a parser."""
    upscale = parser.add_mutually_exclusive_group()
    upscale.add_argument('--upscale', dest='upscale', action='store_true', default=None,
                         help='Allow medium-size derivatives to enlarge small images')
    upscale.add_argument('--no-upscale', dest='upscale', action='store_false',
                         help='Never enlarge images for medium-size derivatives')
    parser.add_argument('--tmp-folder', metavar='PATH', help='Override DERIVGEN_TMP_FOLDER')


def cmd_derive(args: argparse.Namespace) -> int:
    """Execute derive command."""
    logger = setup_logging(args.verbose)

    try:
        store = get_store(args, logger)
    except ValueError:
        return 1

    config = load_derivative_config(args, logger)
    if config is None:
        return 1

    kinds = args.kind or list(KINDS)
    logger.info(f"Derivatives: {', '.join(kinds)} (force={args.force})")
    if args.limit:
        logger.info(f"Test mode: limiting to {args.limit} objects")

    try:
        generator = build_generator(store, config, logger)
        reporter = None if args.quiet else Reporter(logger=logger)
        deriver = BatchDeriver(
            store=store,
            generator=generator,
            cadence=args.cadence,
            dry_run=args.dry_run,
            reporter=reporter,
            logger=logger
        )
        stats = deriver.derive(
            pids=args.pid,
            kinds=kinds,
            force=args.force,
            limit=args.limit
        )

        if not args.quiet:
            print()
            Reporter().report_summary(stats)

        return 0 if stats.failures == 0 else 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Derivation failed: {e}")
        return 1


def cmd_ingest(args: argparse.Namespace) -> int:
    """Execute ingest command: store a file as an object's OBJ."""
    logger = setup_logging(args.verbose)

    if not os.path.isfile(args.file):
        logger.error(f"File not found: {args.file}")
        return 1

    try:
        store = get_store(args, logger)
    except ValueError:
        return 1

    mime_type = args.mime_type or MimeRegistry().mime_type_for(args.file)

    try:
        try:
            obj = store.get_object(args.pid)
        except ObjectNotFoundError:
            obj = store.create_object(args.pid, label=args.label or '')

        with open(args.file, 'rb') as f:
            content = f.read()

        existing = store.get_datastream(obj, OBJ)
        if existing is None:
            datastream = store.create_datastream(obj, OBJ, ControlGroup.MANAGED)
            datastream.label = args.label or os.path.basename(args.file)
            datastream.mime_type = mime_type
            datastream.content = content
            store.ingest(obj, datastream)
        else:
            new_mime = mime_type if mime_type != existing.mime_type else None
            store.update_datastream(obj, existing, content, mime_type=new_mime)

        logger.info(f"Stored {args.file} as {OBJ} of {args.pid} ({mime_type}, {len(content)} bytes)")
        return 0

    except ObjectStoreError as e:
        logger.error(f"Ingest failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Ingest failed: {e}")
        return 1


def cmd_serve(args: argparse.Namespace) -> int:
    """Execute serve command: run the HTTP dispatch endpoint."""
    from .server import create_app

    logger = setup_logging(args.verbose)

    try:
        store = get_store(args, logger)
    except ValueError:
        return 1

    config = load_derivative_config(args, logger)
    if config is None:
        return 1
    generator = build_generator(store, config, logger)

    app = create_app(store, generator, logger)
    logger.info(f"Listening on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port, quiet=not args.verbose)
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='derivgen',
        description='Thumbnail and medium-size derivatives for repository objects',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m derivgen ingest --local-root /data --pid demo:1 photo.jpg
  python -m derivgen derive --local-root /data --pid demo:1
  python -m derivgen derive --kind medium --force --upscale
  python -m derivgen serve --port 8080

Storage options:
  Use --local-root for local filesystem, or S3 environment variables for S3.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Derive command
    derive_parser = subparsers.add_parser('derive', help='Generate derivatives')
    derive_parser.add_argument('--pid', action='append',
                               help='Object(s) to process (default: all objects)')
    derive_parser.add_argument('-k', '--kind', action='append', choices=sorted(KINDS),
                               help='Derivative kind(s) (default: all)')
    derive_parser.add_argument('-f', '--force', action='store_true',
                               help='Regenerate derivatives that already exist')
    derive_parser.add_argument('-c', '--cadence', type=float, default=0.0,
                               help='Seconds between objects')
    derive_parser.add_argument('-n', '--dry-run', action='store_true',
                               help='Show what would be done')
    derive_parser.add_argument('--limit', type=int, metavar='N',
                               help='Limit to N objects (for testing)')
    derive_parser.add_argument('-q', '--quiet', action='store_true',
                               help='Suppress per-object output')
    derive_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_derivative_arguments(derive_parser)
    add_storage_arguments(derive_parser)

    # Ingest command
    ingest_parser = subparsers.add_parser('ingest', help='Store an image as the OBJ of an object')
    ingest_parser.add_argument('file', help='Image file to store')
    ingest_parser.add_argument('--pid', required=True, help='Object pid')
    ingest_parser.add_argument('--label', help='Label for a new object')
    ingest_parser.add_argument('--mime-type', help='MIME type (default: from extension)')
    ingest_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(ingest_parser)

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP dispatch endpoint')
    serve_parser.add_argument('--host', default='127.0.0.1', help='Bind address')
    serve_parser.add_argument('--port', type=int, default=8080, help='Port')
    serve_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_derivative_arguments(serve_parser)
    add_storage_arguments(serve_parser)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'derive':
        return cmd_derive(parsed_args)
    elif parsed_args.command == 'ingest':
        return cmd_ingest(parsed_args)
    elif parsed_args.command == 'serve':
        return cmd_serve(parsed_args)

    return 1

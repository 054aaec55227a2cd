"""
Main entry point for running the package as a module.

Usage:
    python -m derivgen ingest --local-root /data --pid demo:1 photo.jpg
    python -m derivgen derive --local-root /data --pid demo:1
    python -m derivgen serve --local-root /data
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())

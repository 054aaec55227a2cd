"""
HTTP endpoint through which a host triggers derivative generation.
"""

import logging
from functools import wraps
from typing import Optional

from bottle import Bottle, HTTPResponse, Response, abort, request, response

from .config import str2bool
from .derivatives import KINDS, DerivativeGenerator
from .object_store import ObjectNotFoundError, ObjectStore, ObjectStoreError


def allow_cross_origin(func):
    """Decorate a view function to allow cross domain access."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except HTTPResponse as r:
            r.set_header('Access-Control-Allow-Origin', '*')
            raise
        (result if isinstance(result, Response) else response) \
            .set_header('Access-Control-Allow-Origin', '*')
        return result
    return wrapper


def create_app(
    store: ObjectStore,
    generator: DerivativeGenerator,
    logger: Optional[logging.Logger] = None
) -> Bottle:
    """
    Build the Bottle application.

    Routes:
        GET  /objects/<pid>/derivatives         which derivatives exist
        POST /objects/<pid>/derivatives/<kind>  run the pipeline (?force=true)
    """
    app = Bottle()
    log = logger or logging.getLogger(__name__)

    def load_object(pid):
        try:
            return store.get_object(pid)
        except ObjectNotFoundError:
            abort(404, f"Unknown object: {pid}")
        except ObjectStoreError as e:
            log.error(f"Error loading {pid}: {e}")
            abort(502, f"Storage error loading {pid}")

    @app.route('/objects/<pid>/derivatives', method='GET')
    @allow_cross_origin
    def list_derivatives(pid):
        """Report which derivative datastreams an object has."""
        obj = load_object(pid)
        return {
            'pid': obj.pid,
            'derivatives': {
                name: obj.has_datastream(kind.dsid) for name, kind in KINDS.items()
            },
        }

    @app.route('/objects/<pid>/derivatives/<kind>', method='POST')
    @allow_cross_origin
    def create_derivative(pid, kind):
        """Generate one derivative and return its outcome."""
        if kind not in KINDS:
            abort(400, f"Unknown derivative kind: {kind!r}")
        force = str2bool(request.query.get('force', 'false')) or False
        obj = load_object(pid)

        log.debug(f"Derivative request: {pid} {kind} force={force}")
        outcome = generator.create(obj, KINDS[kind], force)
        outcome.log_to(log)

        result = outcome.to_dict()
        result['pid'] = pid
        result['dsid'] = KINDS[kind].dsid
        return result

    return app

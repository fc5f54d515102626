import logging
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from procurement.errors import Forbidden
from procurement.services.policy import missing_permissions

logger = logging.getLogger(__name__)


def require_permissions(*codes: str):
    """Guard a view behind a valid token that holds every code in ``codes``."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            missing = missing_permissions(*codes)
            if missing:
                logger.warning('permission denied user=%s view=%s missing=%s',
                               get_jwt_identity(), fn.__name__, ','.join(missing))
                raise Forbidden('Missing permission', detail=f"requires {', '.join(missing)}")
            return fn(*args, **kwargs)
        return wrapper
    return outer

# utils/context.py

"""
Per-thread record of who is making the current change.

AuditContextMiddleware fills it for web requests; RequestContext fills it
for management commands and scripts. BaseModel.save() reads it to stamp
created_by_id / updated_by_id and the client IP.
"""

from threading import local
import logging

logger = logging.getLogger(__name__)

_state = local()


def _build_context(user, ip_address, path):
    return {
        'user': user,
        'ip_address': ip_address,
        'request_path': path or '',
    }


def set_request_context(user=None, ip_address=None, request_path=None):
    """Remember the acting user (only if authenticated) and client IP"""
    if user is not None and not user.is_authenticated:
        user = None
    _state.context = _build_context(user, ip_address, request_path)
    logger.debug(f"Audit context set for {request_path}: user={user}, ip={ip_address}")


def get_request_context():
    """Current context dict, or None outside a request"""
    return getattr(_state, 'context', None)


def clear_request_context():
    _state.__dict__.pop('context', None)


def get_client_ip(request):
    """First address in X-Forwarded-For when behind a proxy, else REMOTE_ADDR"""
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class RequestContext:
    """
    Attribute writes made outside a request to a user.

    Example:
        with RequestContext(user=registrar, ip_address='127.0.0.1'):
            AcademicYearService.create_year('2026-2027')
    """

    def __init__(self, user=None, ip_address=None, request_path=None):
        self.context = _build_context(user, ip_address, request_path)
        self.saved = None

    def __enter__(self):
        self.saved = get_request_context()
        _state.context = self.context
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.saved is None:
            clear_request_context()
        else:
            _state.context = self.saved

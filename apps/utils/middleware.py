# utils/middleware.py

from utils.context import set_request_context, clear_request_context, get_client_ip


class AuditContextMiddleware:
    """Expose request.user and the client IP to model saves for one request"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_request_context(
            user=getattr(request, 'user', None),
            ip_address=get_client_ip(request),
            request_path=request.path,
        )
        try:
            return self.get_response(request)
        finally:
            clear_request_context()

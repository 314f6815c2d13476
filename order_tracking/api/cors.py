# order_tracking/api/cors.py
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from order_tracking.http_error_handlers import unhandled_error_response

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class PermissiveCORSMiddleware(BaseHTTPMiddleware):
    """
    Any origin, fixed method/header lists. Every OPTIONS request is answered
    here with a bare 200, whether or not it is a real preflight.

    Errors that escape the app are rendered here too, so a 500 carries the
    same headers as any other response.
    """

    async def dispatch(self, request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as exc:
            response = unhandled_error_response(request, exc)
        response.headers.update(CORS_HEADERS)
        return response

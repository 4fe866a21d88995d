"""
HTTP Middleware
Client identification applied to every API request.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


class ClientIdMiddleware(BaseHTTPMiddleware):
    """Reject API calls whose `clientid` header does not match the configured client."""

    async def dispatch(self, request: Request, call_next):
        settings = request.app.state.settings
        if not settings.is_local and request.url.path.startswith(settings.api_prefix):
            client_id = request.headers.get("clientid", "")
            if not client_id:
                return JSONResponse(
                    status_code=401,
                    content={"success": False, "message": "ClientId header is missing"},
                )
            if client_id != settings.client_id:
                return JSONResponse(
                    status_code=401,
                    content={"success": False, "message": "Invalid Client Id"},
                )

        return await call_next(request)

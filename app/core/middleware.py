"""
Request logging middleware
"""

import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from app.core.logging import audit_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Time every request and write an api_access audit event"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception:
            audit_logger.log_api_access(
                request=request,
                response_status=500,
                processing_time=time.time() - start_time,
            )
            raise

        audit_logger.log_api_access(
            request=request,
            response_status=response.status_code,
            processing_time=time.time() - start_time,
        )
        response.headers["X-Process-Time"] = f"{time.time() - start_time:.4f}"
        return response

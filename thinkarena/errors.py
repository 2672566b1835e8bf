from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarHTTP
import logging

logger = logging.getLogger("thinkarena")


class UpstreamUnavailable(Exception):
    """The generative-text backend failed or timed out; the caller may retry."""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


def install_error_handlers(app):
    @app.exception_handler(StarHTTP)
    async def http_exc(_: Request, exc: StarHTTP):
        return JSONResponse({"error": f"HTTP_{exc.status_code}", "detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(UpstreamUnavailable)
    async def upstream(_: Request, exc: UpstreamUnavailable):
        logger.warning(f"Upstream text generation failed after {exc.attempts} attempt(s): {exc}")
        return JSONResponse(
            {"error": "UPSTREAM_UNAVAILABLE", "detail": "Text generation service unavailable", "retryable": True},
            status_code=503,
        )

    @app.exception_handler(Exception)
    async def unhandled(_: Request, exc: Exception):
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse({"error": "INTERNAL_ERROR", "detail": "Unexpected error"}, status_code=500)

from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse


class PortfolioError(RuntimeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(PortfolioError):
    """Client supplied data that can be rejected before any remote side effect."""

    status_code = status.HTTP_400_BAD_REQUEST


class PublishingFailure(PortfolioError):
    """A remote publishing step failed; the repository may already exist."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
    _ = request
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.api.v1.health import legacy_router as legacy_health_router
from app.api.v1.health import router as health_router
from app.api.v1.portfolio import legacy_router as legacy_portfolio_router
from app.api.v1.portfolio import router as portfolio_router
from app.api.v1.cv import cv_screening_error_handler, router as cv_router
from app.core.errors import PortfolioError, portfolio_error_handler
from app.core.rate_limit import limiter
from app.core.config import settings
from app.core.lifespan import lifespan
from app.services.cv_screening import CvScreeningError

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="ePortfolio Generator API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=settings.cors_allow_origin_regex,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(PortfolioError, portfolio_error_handler)
app.add_exception_handler(CvScreeningError, cv_screening_error_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(portfolio_router, prefix="/v1", tags=["Portfolio"])
app.include_router(cv_router, prefix="/v1", tags=["CV"])
app.include_router(legacy_health_router, tags=["Health"])
app.include_router(legacy_portfolio_router, tags=["Portfolio"])

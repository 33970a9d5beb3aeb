"""FastAPI 入口：应用工厂、生命周期与异常映射。"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from academy import __version__
from academy.api import router as api_router
from academy.config import DEFAULT_JWT_SECRET, Settings, get_settings
from academy.dependencies import build_services
from academy.errors import AcademyError, StorageError, Unauthenticated
from academy.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _error_response(exc: AcademyError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=headers
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AcademyError)
    async def handle_academy_error(_request: Request, exc: AcademyError) -> JSONResponse:
        if isinstance(exc, StorageError):
            # 日志已在 StorageClient 中记录，这里只返回通用错误
            return _error_response(StorageError())
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
        message = first.get("msg", "Invalid input")
        return JSONResponse(status_code=400, content={"detail": f"{field}: {message}"})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """应用工厂，便于测试注入配置。"""

    settings = settings or get_settings()
    setup_logging(settings.log_level)
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("Using the default token signing secret; set ACADEMY_JWT_SECRET")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services = build_services(settings)
        services.storage.start()
        app.state.services = services
        try:
            yield
        finally:
            services.storage.close()

    app = FastAPI(title="Academy Back-office API", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization"],
    )
    register_exception_handlers(app)

    @app.get("/", response_class=PlainTextResponse)
    def health() -> str:
        return "Academy back-office running"

    app.include_router(api_router)
    return app


app = create_app()

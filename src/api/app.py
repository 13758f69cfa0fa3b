from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=exc.headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    from sqlmodel import SQLModel
    from src.depends import engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    app.state.security.start()
    try:
        yield
    finally:
        app.state.security.shutdown()


def create_app(ApplicationConfig, runtime=None) -> FastAPI:
    from src.adapter.services.runtime import SecurityRuntime

    app = FastAPI(title="Security Service", version="0.1.0", lifespan=lifespan)
    app.state.security = runtime or SecurityRuntime(ApplicationConfig)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import api_keys, diagnostics, encryption_keys, health, mfa, security, v1
    from src.api.utils.api_key_auth import record_api_key_usage

    app.middleware("http")(record_api_key_usage)

    app.include_router(health.router, tags=["Health"])
    app.include_router(security.router, tags=["Security"])
    app.include_router(api_keys.router, tags=["API Keys"])
    app.include_router(mfa.router, tags=["MFA"])
    app.include_router(encryption_keys.router, tags=["Encryption Keys"])
    app.include_router(diagnostics.router, tags=["Diagnostics"])
    app.include_router(v1.router, tags=["Public API"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    return app

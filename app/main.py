import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes.health import router as health_router
from app.api.routes.internal_ledger import router as internal_ledger_router
from app.api.routes.posts import router as posts_router
from app.api.routes.subscriptions import router as subscriptions_router
from app.api.routes.unlocks import router as unlocks_router
from app.api.routes.wallet import router as wallet_router
from app.core.config import get_settings
from app.core.logging import bind_request_context, configure_logging

logger = structlog.get_logger(__name__)


async def _datastore_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("datastore_error", error_type=type(exc).__name__, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": {"code": "E_INTERNAL"}})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Paywall API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = bind_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
        )
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_exception_handler(SQLAlchemyError, _datastore_error_handler)
    app.include_router(health_router)
    app.include_router(posts_router)
    app.include_router(subscriptions_router)
    app.include_router(unlocks_router)
    app.include_router(wallet_router)
    app.include_router(internal_ledger_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()

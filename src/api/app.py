import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from src.app.services.credentials import CredentialVerifier
from src.app.services.session_registry import SessionSettings
from src.app.services.token_issuer import TokenIssuer, TokenSettings
from src.domain.rbac import validate_role_mapping
from .error import ClientError, ServerError

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    if exc.base_error.details:
        error_dict["details"] = exc.base_error.details
    logger.warning(f"Client error: {exc.base_error.code} on {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    error_dict = {"code": exc.base_error.code, "message": "Internal server error"}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database failure on %s", request.url.path)
    error_dict = {"code": "INTERNAL_FAILURE", "message": "Internal server error"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


async def run_expiry_sweeper(
    interval_seconds: int, session_factory, session_settings: SessionSettings
):
    """Expire stale and idle sessions and stale impersonations until cancelled"""
    from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
    from src.app.use_cases.sessions import SweepExpiredUseCase

    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with session_factory() as session:
                await SweepExpiredUseCase(
                    SqlAlchemyUnitOfWork(session), session_settings
                ).execute()
        except Exception:
            logger.exception("Expiry sweep failed; retrying next interval")


def create_lifespan(ApplicationConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
        from src.app.use_cases.rbac import SeedSystemRolesUseCase
        from src.depends import AsyncSessionLocal, engine

        if ApplicationConfig.DB_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)

        async with AsyncSessionLocal() as session:
            await SeedSystemRolesUseCase(SqlAlchemyUnitOfWork(session)).execute()

        sweeper = asyncio.create_task(
            run_expiry_sweeper(
                ApplicationConfig.SESSION_SWEEP_INTERVAL_SECONDS,
                AsyncSessionLocal,
                app.state.session_settings,
            )
        )
        logger.info("Auth service started")
        try:
            yield
        finally:
            sweeper.cancel()
            try:
                await sweeper
            except asyncio.CancelledError:
                pass
            await engine.dispose()

    return lifespan


def create_app(ApplicationConfig) -> FastAPI:
    # Fail fast on missing signing key or a broken role table
    token_settings = TokenSettings.from_config(ApplicationConfig)
    validate_role_mapping()

    app = FastAPI(title="POS Auth Service", version="0.1.0", lifespan=create_lifespan(ApplicationConfig))

    app.state.token_issuer = TokenIssuer(token_settings)
    app.state.session_settings = SessionSettings.from_config(ApplicationConfig)
    app.state.credentials = CredentialVerifier(rounds=ApplicationConfig.BCRYPT_ROUNDS)
    app.state.admin_api_key = ApplicationConfig.ADMIN_API_KEY

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import admin, audit, auth, impersonation, rbac, sessions, user

    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(user.router, tags=["User"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(impersonation.router, tags=["Impersonation"])
    app.include_router(audit.router, tags=["Audit"])
    app.include_router(rbac.router, tags=["RBAC"])
    app.include_router(admin.router, tags=["Admin"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)
    app.add_exception_handler(SQLAlchemyError, handle_database_error)

    return app

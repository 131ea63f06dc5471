"""Entry point for the backend proxy service."""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.constants import HTTP_TIMEOUT_SECONDS
from common.exceptions import (
    AuthError,
    ConfigurationError,
    DriveGateError,
    ProxyError,
    SessionError
)
from common.logging_config import setup_logging
from proxy.config import PROXY_HOST, PROXY_PORT, GraphSettings, load_graph_settings
from proxy.credential_cache import CredentialCache
from proxy.graph_client import GraphClient
from proxy.routes.file_routes import router as file_router
from proxy.routes.upload_routes import router as upload_router
from proxy.schemas.common import ErrorResponse
from proxy.services.file_service import FileService
from proxy.services.upload_service import UploadSessionNegotiator

logger = setup_logging('proxy')


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Configuration error: {exc} [request_id={request_id}] path={request.url.path}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def auth_error_handler(request: Request, exc: AuthError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Authentication error: {exc} [request_id={request_id}] path={request.url.path}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def session_error_handler(request: Request, exc: SessionError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Upload session error: {exc} status={exc.status_code} [request_id={request_id}] path={request.url.path}"
    )
    return _error(exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def proxy_error_handler(request: Request, exc: ProxyError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Proxy error: {exc} status={exc.status_code} [request_id={request_id}] path={request.url.path}"
    )
    return _error(exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def drivegate_error_handler(request: Request, exc: DriveGateError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Unhandled DriveGate error: {exc} [request_id={request_id}] path={request.url.path}", exc_info=True)
    return _error(exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = f"Method Not Allowed. {request.method} is not accepted on {request.url.path}."
    else:
        message = str(exc.detail)
    return _error(exc.status_code, message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    if first.get("type") == "json_invalid":
        return _error(status.HTTP_400_BAD_REQUEST, "Bad Request: the request body is not valid JSON.")
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"Bad Request: invalid request body at {location}: {first.get('msg', 'invalid value')}."
    return _error(status.HTTP_400_BAD_REQUEST, message)


def create_app(
    settings: Optional[GraphSettings] = None,
    transport: Optional[httpx.BaseTransport] = None,
    clock: Callable[[], float] = time.time
) -> FastAPI:
    """
    Build the proxy application and its per-application services.

    Args:
        settings: Graph credentials (read from the environment when None)
        transport: Optional httpx transport for outbound calls (tests inject a mock)
        clock: Time source for the credential cache

    Returns:
        Configured FastAPI application
    """
    settings = settings if settings is not None else load_graph_settings()
    http_client = httpx.Client(timeout=HTTP_TIMEOUT_SECONDS, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.is_complete():
            logger.warning("Microsoft Graph API credentials are not fully set; API calls will fail")
        logger.info("Proxy service starting up...")
        yield
        http_client.close()
        logger.info("Proxy service shut down")

    app = FastAPI(
        title="DriveGate Proxy",
        description="Brokers Microsoft Graph drive calls without exposing the application secret",
        version="1.0.0",
        lifespan=lifespan
    )

    credentials = CredentialCache(settings, http_client, clock=clock)
    graph = GraphClient(settings, credentials, http_client)

    app.state.settings = settings
    app.state.credentials = credentials
    app.state.file_service = FileService(graph)
    app.state.upload_negotiator = UploadSessionNegotiator(graph)

    app.middleware("http")(log_requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(SessionError, session_error_handler)
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(DriveGateError, drivegate_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(file_router)
    app.include_router(upload_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "DriveGate Proxy API", "status": "running"}

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "proxy.main:app",
        host=PROXY_HOST,
        port=PROXY_PORT
    )


if __name__ == "__main__":
    main()

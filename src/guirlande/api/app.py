import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..common.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    GuirlandeError,
    LoopParseError,
    ModuleError,
    NotFoundError,
    ValidationError,
)
from ..core.config import ServerConfig
from ..core.context import ServiceContext, build_context
from . import guirlande, modules, projects, websocket

logger = logging.getLogger(__name__)

ERROR_STATUSES = [
    (LoopParseError, 400, "invalid_loop"),
    (NotFoundError, 404, "not_found"),
    (ModuleError, 400, "bad_request"),
    (AccessDeniedError, 403, "access_denied"),
    (AuthenticationError, 401, "unauthorized"),
]

HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "access_denied",
    404: "not_found",
    405: "method_not_allowed",
    503: "service_unavailable",
}


def error_response(status_code: int, errors: List[Dict[str, Any]]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errors": errors})


def _domain_error_response(exc: GuirlandeError) -> JSONResponse:
    if isinstance(exc, ValidationError):
        return error_response(400, exc.errors)
    for error_class, status_code, code in ERROR_STATUSES:
        if isinstance(exc, error_class):
            item = {"error": code, "error_description": str(exc)}
            if isinstance(exc, LoopParseError):
                item["field"] = "loop"
            return error_response(status_code, [item])
    return _server_error(exc)


def _server_error(exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {exc}", exc_info=exc)
    return error_response(
        500,
        [{"error": "server_error", "error_description": "An internal error occurred"}],
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GuirlandeError)
    async def guirlande_error_handler(request: Request, exc: GuirlandeError):
        return _domain_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            errors.append(
                {
                    "error": "invalid_request",
                    "error_description": err.get("msg", "Invalid value"),
                    "field": ".".join(loc) or None,
                }
            )
        return error_response(400, errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "error")
        return error_response(
            exc.status_code, [{"error": code, "error_description": str(exc.detail)}]
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        return _server_error(exc)


def init_app(
    context: Optional[ServiceContext] = None, config: Optional[ServerConfig] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without a prebuilt `context`, one is built from `config` (or
    `ServerConfig.load()`) on startup.
    """
    app = FastAPI(
        title="Guirlande API",
        description="RGB garland and connected modules control",
        version="1.0.0",
    )

    if context is None and config is None:
        config = ServerConfig.load()
    origins = (context.config if context else config).network.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.context = context
    app.state.startup_complete = False

    register_exception_handlers(app)

    app.include_router(websocket.router)
    app.include_router(modules.router)
    app.include_router(guirlande.router)
    app.include_router(projects.router)

    @app.on_event("startup")
    async def startup_event():
        """Build services and load modules"""
        logger.info("Starting Guirlande server")
        if app.state.context is None:
            app.state.context = build_context(config)
        ctx: ServiceContext = app.state.context
        await ctx.modules.load()
        await ctx.guirlande.get_settings()
        app.state.startup_complete = True
        logger.info("Guirlande server started")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Stop presets, disconnect modules and release the output"""
        ctx: Optional[ServiceContext] = app.state.context
        app.state.startup_complete = False
        if ctx is None:
            return
        logger.info("Shutting down Guirlande server")
        try:
            ctx.guirlande.stop_presets()
            await ctx.modules.unload()
            await ctx.scheduler.stop_all()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)
        finally:
            ctx.output.cleanup()

    @app.get("/health")
    async def health_check():
        ctx: Optional[ServiceContext] = app.state.context
        if not app.state.startup_complete or ctx is None:
            return {"status": "starting", "modules": 0, "online": 0, "presets": False}
        return {
            "status": "healthy",
            "modules": len(ctx.modules.modules),
            "online": len(ctx.modules.online),
            "presets": ctx.guirlande.presets_active,
        }

    return app

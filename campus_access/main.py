# =======================================================================================
# campus_access/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from .config import config
from .api.routes.access import router as access_router
from .api.routes.auth import router as auth_router
from .api.routes.users import router as users_router
from .database import DatabaseManager, db_manager
from .models.schemas import HealthResponse

logger = logging.getLogger("campus_access.main")


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "Invalid request. " + "; ".join(parts)


def create_app(database: Optional[DatabaseManager] = None) -> FastAPI:
    app = FastAPI(
        title="Campus Access Control API",
        version="1.0.0",
        description="Barcode-based campus entry/exit logging",
        debug=config.API_DEBUG,
    )
    app.state.db_manager = database or db_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Every error leaves the API as {"error": "..."}
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    # Routers
    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(users_router, prefix="/api", tags=["users"])
    app.include_router(access_router, prefix="/api", tags=["access"])

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        try:
            app.state.db_manager.fetch_one("SELECT 1")
            return HealthResponse(status="ok", dataAvailable=True, message=None)
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return HealthResponse(status="error", dataAvailable=False, message=str(e))

    logger.debug("Campus access API created (db=%s)", app.state.db_manager.engine.url.drivername)
    return app


app = create_app()

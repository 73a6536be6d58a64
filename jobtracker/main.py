from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jobtracker.config import get_settings
from jobtracker.errors import BusyError, DraftStateError, RemoteError, ValidationError
from jobtracker.middleware.correlation import CorrelationMiddleware
from jobtracker.routes import applications
from jobtracker.services.gateway import ApplicationGateway
from jobtracker.services.tracker import JobTracker
from jobtracker.utils import metrics
from jobtracker.utils.logger import logger


def create_app(gateway: Optional[ApplicationGateway] = None) -> FastAPI:
    """Build the API around one JobTracker. A gateway can be injected for tests."""
    settings = get_settings()
    app = FastAPI(title=settings.app_name, version=settings.app_version)

    allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Correlation-ID"],
    )
    app.add_middleware(CorrelationMiddleware)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting JobTracker...")
        app.state.tracker = JobTracker(gateway or ApplicationGateway())
        # A failed first load leaves an empty, retryable list
        await app.state.tracker.load()
        logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.tracker.gateway.aclose()

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": exc.message, "field": exc.field})

    @app.exception_handler(BusyError)
    async def busy_error_handler(request: Request, exc: BusyError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(DraftStateError)
    async def draft_state_error_handler(request: Request, exc: DraftStateError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(RemoteError)
    async def remote_error_handler(request: Request, exc: RemoteError):
        return JSONResponse(
            status_code=502,
            content={"detail": f"Store operation '{exc.operation}' failed. Please try again."},
        )

    # Health check endpoint (minimal response to prevent information disclosure)
    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.get("/metrics")
    async def get_metrics():
        return metrics.get_snapshot()

    app.include_router(applications.router, prefix="/api/applications", tags=["Applications"])
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "jobtracker.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )

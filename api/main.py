"""
FastAPI application for the Therapy Queue service.

Serves the ready/waiting queues and the scheduling operations used by the
portal's therapy management, scheduling and booking screens.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import therapy_router
from config import get_settings
from scheduling import SchedulingError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="Therapy Queue API",
    description="Priority scheduling of therapy sessions with ready and waiting queues",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(therapy_router)


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError):
    logger.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same {message} shape as scheduling errors."""
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid request body",
            "errors": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "therapy_queue"}


@app.get("/")
def root():
    """Root endpoint with API info."""
    return {
        "service": "Therapy Queue API",
        "version": "1.0.0",
        "endpoints": {
            "schedule": "/api/therapies/schedule",
            "ready": "/api/therapies/ready",
            "waiting": "/api/therapies/waiting",
            "move_to_waiting": "/api/therapies/cancel/{id}",
            "reschedule": "/api/therapies/reschedule",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )

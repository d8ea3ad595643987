"""
Smart Tutor Practice Engine

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smart_tutor.api.deps import Registry
from smart_tutor.api.v1 import router as api_v1_router
from smart_tutor.config import get_settings
from smart_tutor.engines.practice.exceptions import InvalidQuestion, NoQuestionAvailable
from smart_tutor.logging_config import configure_logging, get_logger
from smart_tutor.orchestration.state_machine import InvalidTransition
from smart_tutor.schemas.common import ErrorResponse, HealthResponse

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.

    Runs startup and shutdown tasks.
    """
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    logger.info("Starting %s v%s", settings.project_name, settings.version)
    if not settings.generation_configured:
        logger.info("No OpenAI API key configured; questions will come from the local bank")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.project_name,
    description="""
    Smart Tutor Practice Engine

    Adaptive multiple-choice practice for programming subjects.

    ## Features

    - **Question generation**: LLM-generated questions with a curated local fallback
    - **Scoring**: base points per tier with a bonus for fast correct answers
    - **Adaptive tiers**: promotion and demotion between basic, intermediate and advanced
    - **Sessions**: completion summary after a fixed number of questions
    - **Placement**: starting tier from a diagnostic assessment score
    """,
    version=settings.version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


_cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",  # Vite default
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Uniform JSON body for 4xx/5xx raised by endpoints."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
):
    """Handle request validation errors."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Validation error", "errors": errors},
    )


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    """Operation not allowed in the session's current state."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            **ErrorResponse(detail=str(exc), code="invalid_transition").model_dump(exclude_none=True),
            "state": exc.from_state.value,
        },
    )


@app.exception_handler(NoQuestionAvailable)
async def no_question_handler(request: Request, exc: NoQuestionAvailable):
    """The caller should pick a different subject."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(detail=str(exc), code="no_question_available", field="subject").model_dump(),
    )


@app.exception_handler(InvalidQuestion)
async def invalid_question_handler(request: Request, exc: InvalidQuestion):
    """A question broke its contract; never scored."""
    logger.error("Invalid question reached evaluation: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(detail="Invalid question", code="invalid_question").model_dump(exclude_none=True),
    )


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled exception: %s", exc)
    if settings.debug:
        content = {"detail": str(exc), "type": type(exc).__name__}
    else:
        content = {"detail": "Internal server error"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content,
    )


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(registry: Registry):
    """Check application health."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        ai_configured=registry.settings.generation_configured,
        active_sessions=len(registry),
    )


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.project_name,
        "version": settings.version,
        "docs": "/docs" if settings.debug else "disabled",
        "api": {
            "v1": "/api/v1",
        },
    }


app.include_router(
    api_v1_router,
    prefix=settings.api_v1_prefix,
)


# Main entry point for development
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "smart_tutor.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scorebook.api.v1.courses import router as courses_router
from scorebook.api.v1.dashboard import router as dashboard_router
from scorebook.api.v1.rounds import router as rounds_router
from scorebook.core.errors import (
    ConstraintViolation,
    InvalidInput,
    NotFound,
    ScorebookError,
    TransactionFailure,
)
from scorebook.core.logging import configure_logging
from scorebook.core.settings import settings

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    InvalidInput: 400,
    NotFound: 404,
    ConstraintViolation: 409,
    TransactionFailure: 503,
}


@app.exception_handler(ScorebookError)
async def handle_scorebook_error(request: Request, exc: ScorebookError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 500
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(
    courses_router,
    prefix=settings.API_V1_STR,
    tags=["Courses"],
)
app.include_router(
    rounds_router,
    prefix=settings.API_V1_STR,
    tags=["Rounds"],
)
app.include_router(
    dashboard_router,
    prefix=settings.API_V1_STR,
    tags=["Dashboard"],
)

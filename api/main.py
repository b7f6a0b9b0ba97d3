import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from auth import router as auth_router
from auth.repository import UserStore
from core import db
from core.config import get_settings, warn_insecure_settings
from core.logging import setup_logging
from kols import router as kols_router
from kols.repository import KolStore
from kols.validation import first_field_error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    warn_insecure_settings(settings)

    # One pool per process; stores borrow it through their dependencies.
    pool = await db.init_pool(settings)
    await KolStore(pool).create_table()
    await UserStore(pool).create_table()
    logger.info("startup_complete")
    try:
        yield
    finally:
        await db.close_pool()
        logger.info("shutdown_complete")


app = FastAPI(title="KOL Registry API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().allowed_origins),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error(_: Request, exc: StarletteHTTPException) -> Response:
    # Auth failures are plain text; everything else is {"error": ...}.
    if exc.status_code == status.HTTP_403_FORBIDDEN:
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error(_: Request, exc: RequestValidationError) -> Response:
    # Body field errors are reported one at a time, first declared field first.
    errors = exc.errors()
    fields = [{**e, "loc": tuple(e["loc"])[1:]} for e in errors if len(e.get("loc", ())) > 1]
    if fields:
        message = first_field_error(fields).reason
    else:
        message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)


app.include_router(auth_router.router, tags=["auth"])
app.include_router(kols_router.router, tags=["kols"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from filegate.api.routes import router as files_router
from filegate.core.config import settings
from filegate.core.database import db
from filegate.schemas.models import VersionResponse, EnvResponse
from filegate.services.storage import storage_service

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("filegate.access")

PUBLIC_DIR = Path(__file__).resolve().parent / "public"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    db.connect()
    await db.files.ensure_indexes()
    storage_service.connect()

    logger.info("Server running on port %s", settings.PORT)
    logger.info("APP_ENV=%s APP_VERSION=%s", settings.APP_ENV, settings.APP_VERSION)
    logger.info("AWS_REGION=%s S3_BUCKET=%s METADATA_TABLE=%s",
                settings.AWS_REGION, settings.S3_BUCKET, settings.METADATA_TABLE)

    yield

    db.close()


app = FastAPI(title="Presigned File Service", version=settings.APP_VERSION, lifespan=lifespan)


def _error_status(exc: Exception) -> int:
    # upstream errors may carry their own HTTP status
    status_code = getattr(exc, "status_code", None)
    return status_code if isinstance(status_code, int) else 500


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as exc:
        status_code = _error_status(exc)
        raise
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        client = request.client.host if request.client else "-"
        access_logger.info('%s "%s %s" %s %.1fms', client, request.method,
                           request.url.path, status_code, elapsed_ms)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # only reachable for bodies that are not a JSON object
    return JSONResponse(status_code=400, content={"error": "invalid JSON body"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=_error_status(exc), content={"error": str(exc) or "Internal Server Error"})


@app.get("/health", response_class=PlainTextResponse)
def health_check():
    return "OK"

@app.get("/version", response_model=VersionResponse)
def version():
    return {"version": settings.APP_VERSION}

@app.get("/env", response_model=EnvResponse)
def env():
    return {"env": settings.APP_ENV}


app.include_router(files_router)

# Mounted last so the API routes above take priority over the site root
app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True, check_dir=False), name="public")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)

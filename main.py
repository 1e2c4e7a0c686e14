import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.api import api_router
from app.core.config import settings
from app.core.database import dispose_engine, init_db
from app.core.exceptions import MethodNotSupportedError, StorageError, WaitlistError
from app.core.logging_config import configure_logging
from app.utils import rate_limiter

# Load environment variables
load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

api_description = """
## Waitlist API

- `POST /api/v1/waitlist` - join the waitlist with an email and a Twitter handle
- `GET /api/v1/admin/waitlist` - paginated entries (requires `X-API-Key`)
- `PUT /api/v1/admin/waitlist` - change an entry's status
- `DELETE /api/v1/admin/waitlist?id=...` - remove an entry
"""

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=api_description,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# GZip compression for large JSON responses
app.add_middleware(GZipMiddleware, minimum_size=500)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(message: str, field: str | None = None) -> dict:
    body = {"success": False, "message": message}
    if field:
        body["field"] = field
    return body


@app.exception_handler(WaitlistError)
async def waitlist_error_handler(request: Request, exc: WaitlistError):
    if isinstance(exc, StorageError):
        logger.error("%s %s failed with %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.field))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    field = None
    errors = exc.errors()
    if errors:
        loc = errors[0].get("loc", ())
        if len(loc) > 1 and isinstance(loc[-1], str):
            field = loc[-1]
    return JSONResponse(status_code=400, content=_error_body("Invalid request", field))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        err = MethodNotSupportedError()
        return JSONResponse(status_code=err.status_code, content=_error_body(err.message))
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)), headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=_error_body(StorageError().message))


# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.on_event("startup")
def create_tables_on_startup():
    try:
        init_db()
    except Exception:
        # Do not block startup; requests will report the store as unavailable
        logger.exception("Database initialisation failed")


@app.on_event("shutdown")
def close_connections():
    dispose_engine()
    rate_limiter.close_client()


@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

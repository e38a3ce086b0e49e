import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ALLOWED_ORIGINS, ENVIRONMENT, STORAGE_BACKEND
from .domain.submissions.admin_router import router as admin_router
from .domain.submissions.router import router as submissions_router
from .domain.submissions.schemas import FormType
from .domain.submissions.stores import get_store, initialize_stores
from .email_service import get_email_notifier
from .rate_limiter import RateLimitExceededError
from .recaptcha import get_recaptcha_verifier
from .shared.exceptions import BookingError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    initialize_stores()
    logger.info(f"Submission stores ready ({STORAGE_BACKEND})")
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Clinic Booking Forms API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} - {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are client errors (400)"""
    fields = [".".join(str(part) for part in error.get("loc", ())) for error in exc.errors()]
    logger.warning(f"Validation error for {request.url.path}: {fields}")
    return JSONResponse(status_code=400, content={"message": "Invalid request", "fields": fields})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} - Error: {str(exc)}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# CORS Configuration
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routes
app.include_router(submissions_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {"message": "Clinic Booking Forms API is running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "environment": ENVIRONMENT,
        "emailTransport": get_email_notifier().transport,
        "captcha": "enabled" if get_recaptcha_verifier().enabled else "disabled",
        "storage": {form_type.slug: get_store(form_type).describe() for form_type in FormType},
    }

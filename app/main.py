import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models to ensure they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS, APP_ADMIN_EMAILS, RESEND_API_KEY
from .database import Base, engine
from .domain.demo_slots import admin_router as demo_slots_admin_router
from .domain.demo_slots import router as demo_slots_router
from .shared.errors import DemoSlotError
from .shared.validators import parse_email_list

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SLOW_REQUEST_SECONDS = 2.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("hello_miami API starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables ready")
    except Exception as e:
        # Another worker may have created the tables first
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")

    if not RESEND_API_KEY:
        logger.warning("⚠️ RESEND_API_KEY not set - demo slot emails will fail and be logged")
    organizer_count = len(parse_email_list(APP_ADMIN_EMAILS))
    if organizer_count:
        logger.info(f"📧 {organizer_count} organizer(s) will receive new demo booking alerts")
    else:
        logger.warning("⚠️ APP_ADMIN_EMAILS empty - organizers will not be alerted of new bookings")

    yield
    logger.info("hello_miami API shutting down...")


app = FastAPI(title="hello_miami API", version="1.0.0", lifespan=lifespan)


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry the raw ValueError from field validators
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.exception_handler(DemoSlotError)
async def demo_slot_exception_handler(request: Request, exc: DemoSlotError):
    """Map domain errors to their HTTP status with a plain detail message"""
    logger.warning(f"{request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    A missing Authorization header surfaces from HTTPBearer as a validation
    error; answer it with 401 instead of 422
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(f"Missing or invalid Authorization header on {request.url.path}")
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise

    elapsed = time.perf_counter() - started
    if elapsed > SLOW_REQUEST_SECONDS:
        logger.warning(f"🐌 {request.method} {request.url.path} took {elapsed:.2f}s ({response.status_code})")
    return response


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(demo_slots_router)
app.include_router(demo_slots_admin_router)


@app.get("/")
def root():
    return {"message": "hello_miami API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}

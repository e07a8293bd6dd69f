import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.auth.firebase_app import init_firebase_app
from core.config import settings
from core.errors import AppError, StoreError
from database.mongo import create_client
from database.store import MongoStore, get_store
from routes import auth_route, interaction_route, recipe_route
from utils.image_storage import ImageStorage, configure_cloudinary
from utils.validation import error_details, first_error_message

# ==== Logging ====
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


# ==== Startup / shutdown ====
@asynccontextmanager
async def lifespan(app: FastAPI):
    """External service handles are created once here and reached through dependencies"""
    init_firebase_app()
    logger.info("✅ Firebase initialized")

    client = create_client()
    app.state.db = client[settings.DATABASE_NAME]
    app.state.store = MongoStore(app.state.db)
    app.state.images = ImageStorage(enabled=configure_cloudinary())

    try:
        await app.state.store.ensure_indexes()
    except StoreError as e:
        logger.warning(f"⚠️ Index creation failed: {e.message}")

    logger.info("🚀 Backend services initialized")
    yield

    client.close()
    logger.info("🛑 MongoDB client closed")


# ==== FastAPI app ====
app = FastAPI(title="StreetBites API", version="1.0.0", debug=settings.DEBUG, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials="*" not in settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==== Logging middleware ====
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response: {response.status_code}")
    return response


# ==== Error envelope ====
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"{request.method} {request.url.path} -> 400: {errors}")
    return JSONResponse(
        status_code=400,
        content={"error": first_error_message(errors), "details": error_details(errors)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error")
    detail = str(exc) if settings.DEBUG else "Internal server error"
    return JSONResponse(status_code=500, content={"error": detail})


# ==== Health Check Endpoints ====
@app.api_route("/", methods=["GET", "HEAD"])
async def root():
    return {
        "status": "ok",
        "message": "StreetBites API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.api_route("/health", methods=["GET", "HEAD"])
async def health_check(store: MongoStore = Depends(get_store)):
    try:
        await store.ping()
        mongo_status = "connected"
    except StoreError as e:
        mongo_status = f"error: {e.message}"

    return {
        "status": "ok",
        "services": {"api": "running", "mongodb": mongo_status},
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ==== Routers ====
app.include_router(auth_route.auth_router, prefix=settings.API_PREFIX)
app.include_router(recipe_route.router, prefix=settings.API_PREFIX)
app.include_router(interaction_route.router, prefix=settings.API_PREFIX)

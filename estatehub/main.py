import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from estatehub.core.config import settings
from estatehub.core.database import init_db
from estatehub.core.exceptions import EstateHubError, describe_validation_errors
from estatehub.routers import auth, chats, properties

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Property listings and buyer/lister chat",
    version="1.0.0",
    lifespan=lifespan,
)

# Uploaded listing images are served straight from disk
os.makedirs(os.path.join(settings.UPLOAD_DIR, "properties"), exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(properties.router, prefix="/api")
app.include_router(chats.router, prefix="/api")


# ─── Error responses: always {"success": false, "message": ...} ───────────────

def _failure(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(EstateHubError)
async def estatehub_error_handler(request: Request, exc: EstateHubError):
    logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return _failure(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return _failure(exc.status_code, exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_errors(exc.errors())
    logger.warning("%s %s -> 400 %s", request.method, request.url.path, message)
    return _failure(400, message)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _failure(500, str(exc) or "Server Error")


@app.get("/")
def root():
    return {
        "message": "EstateHub API is running",
        "version": "1.0.0",
        "endpoints": {
            "auth": "/api/auth",
            "properties": "/api/properties",
            "chats": "/api/chats",
        },
    }

@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "timestamp": datetime.utcnow()
    }

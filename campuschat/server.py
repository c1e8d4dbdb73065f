# campuschat/server.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import OperationalError
from starlette.middleware.cors import CORSMiddleware

from campuschat.core.config import FRONTEND_URL, PAYSTACK_SECRET_KEY, JWT_SECRET, UPLOAD_DIR
from campuschat.core.database import engine, init_models
from campuschat.core.errors import AppError
from campuschat.services.upload_service import ensure_upload_dir
from campuschat.api import auth, chat_ws, messages, payments, root, upload

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("campuschat")

app = FastAPI(title="CampusChat API")

app.include_router(root.router)
app.include_router(auth.router)
app.include_router(payments.router)
app.include_router(messages.router)
app.include_router(upload.router)
app.include_router(chat_ws.router)

app.mount("/uploads", StaticFiles(directory=ensure_upload_dir(UPLOAD_DIR)), name="uploads")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ================== ERRORS ==================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(OperationalError)
async def database_error_handler(request: Request, exc: OperationalError):
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ================== LIFECYCLE ==================

@app.on_event("startup")
async def startup():
    missing = []
    if not JWT_SECRET or JWT_SECRET == "default_secret_key":
        missing.append("JWT_SECRET")
    if not PAYSTACK_SECRET_KEY:
        missing.append("PAYSTACK_SECRET_KEY")
    if missing:
        logger.warning("Missing environment variables: %s", ", ".join(missing))
    await init_models()


@app.on_event("shutdown")
async def shutdown():
    await engine.dispose()

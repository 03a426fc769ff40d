from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

# Database migrations are managed exclusively via Alembic
from mmc_admin.database.engine import get_db, check_connection, dispose_engine
from mmc_admin.routers import auth, blogs, testimonials, contact_submissions, newsletter
from mmc_admin.core.config import settings
from mmc_admin.core.exceptions import AppError
from mmc_admin.core.storage import get_upload_manager

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # NOTE: Database migrations are managed by Alembic exclusively.
    # Run: alembic upgrade head
    logger.info("Starting application...")

    if check_connection():
        logger.info("✓ Database connected")
    else:
        # Degraded mode: requests that need the database fail individually
        logger.error("Database unreachable at startup, continuing without it")

    get_upload_manager().ensure_directories()
    logger.info("✓ Upload directories ready")

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown initiated...")
    dispose_engine()
    logger.info("✓ Database connections closed")
    logger.info("Application shutdown complete")

app = FastAPI(
    title="MMC Admin API",
    description="Content management API for the MMC website: blogs, testimonials, contact submissions and newsletters",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(dict.fromkeys([settings.FRONTEND_URL, *settings.CORS_ORIGINS])),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========================================
# ERROR HANDLERS
# ========================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        # Drop the "body"/"query"/"path" source marker
        name = ".".join(loc[1:]) or (loc[0] if loc else "body")
        if name not in fields:
            fields.append(name)
    logger.info(f"{request.method} {request.url.path} -> 400: invalid fields {fields}")
    return JSONResponse(
        status_code=400,
        content={"error": f"Invalid or missing fields: {', '.join(fields)}", "fields": fields},
    )

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# Include routers
app.include_router(auth.router, prefix=settings.API_PREFIX)                 # /api/auth/*
app.include_router(blogs.router, prefix=settings.API_PREFIX)                # /api/blogs/*
app.include_router(testimonials.router, prefix=settings.API_PREFIX)         # /api/testimonials/*
app.include_router(contact_submissions.router, prefix=settings.API_PREFIX)  # /api/contact-submissions/*
app.include_router(newsletter.router, prefix=settings.API_PREFIX)           # /api/newsletter/*

# Uploaded files; directories are created in the lifespan
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)

@app.get("/")
def read_root():
    return {
        "message": "MMC Admin API",
        "version": "1.0.0",
        "modules": {
            "auth": f"{settings.API_PREFIX}/auth/* (login, register, verify)",
            "blogs": f"{settings.API_PREFIX}/blogs/* (blog posts with image uploads)",
            "testimonials": f"{settings.API_PREFIX}/testimonials/* (client testimonials)",
            "contact_submissions": f"{settings.API_PREFIX}/contact-submissions/* (contact form inbox)",
            "newsletter": f"{settings.API_PREFIX}/newsletter/* (subscribers, campaigns, PDF uploads)",
        },
        "health": f"{settings.API_PREFIX}/health",
        "docs": "/docs",
        "redoc": "/redoc"
    }

@app.get(f"{settings.API_PREFIX}/health")
def health_check(db: Session = Depends(get_db)):
    connected = check_connection(db.get_bind())
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "Connected" if connected else "Disconnected",
    }

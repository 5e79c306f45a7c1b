"""
Travel Planner Backend Server
FastAPI application entry point
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

# Import settings
from config.settings import settings

# Import database
from database.base import db_manager
from shared.exceptions import ErrorCode

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Starting Travel Planner Backend Server...")
    logger.info(f"📊 Database: {settings.DATABASE_URL}")
    logger.info(f"🔧 Debug Mode: {settings.DEBUG}")
    logger.info(f"💰 Currency: {settings.DEFAULT_CURRENCY}")

    db_manager.init()

    # Create all tables
    try:
        db_manager.create_all()
        logger.info("✅ Database tables created/verified successfully")
    except Exception as e:
        logger.error(f"❌ Database initialization error: {e}")

    yield

    # Shutdown
    logger.info("👋 Shutting down Travel Planner Backend Server...")
    db_manager.close()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan
)

# CORS Middleware
# For credentials support, we need to specify origins explicitly (can't use "*" with credentials)
dev_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=dev_origins if settings.DEBUG else settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600
)

# Health check endpoint
@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

# Import and include routers
try:
    # Auth routes
    try:
        from modules.auth.routes import router as auth_router
        app.include_router(auth_router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["Authentication"])
        logger.info("✅ Auth routes loaded successfully")
    except Exception as e:
        logger.error(f"❌ Failed to load auth routes: {e}")

    # Catalog routes
    try:
        from modules.catalogs.routes import router as catalogs_router
        app.include_router(catalogs_router, prefix=f"{settings.API_V1_PREFIX}/catalogs", tags=["Catalogs"])
        logger.info("✅ Catalog routes loaded successfully")
    except Exception as e:
        logger.error(f"❌ Failed to load catalog routes: {e}")

    # Bookings routes
    try:
        from modules.bookings.routes import router as bookings_router
        app.include_router(bookings_router, prefix=f"{settings.API_V1_PREFIX}/bookings", tags=["Bookings"])
        logger.info("✅ Bookings routes loaded successfully")
    except Exception as e:
        logger.error(f"❌ Failed to load bookings routes: {e}")

    # Payments routes
    try:
        from modules.payments.routes import router as payments_router
        app.include_router(payments_router, prefix=f"{settings.API_V1_PREFIX}/payments", tags=["Payments"])
        logger.info("✅ Payments routes loaded successfully")
    except Exception as e:
        logger.error(f"❌ Failed to load payments routes: {e}")

    # Reports routes
    try:
        from modules.reports.routes import router as reports_router
        app.include_router(reports_router, prefix=f"{settings.API_V1_PREFIX}/reports", tags=["Reports"])
        logger.info("✅ Reports routes loaded successfully")
    except Exception as e:
        logger.warning(f"⚠️ Reports routes failed: {e}")

except Exception as e:
    logger.warning(f"⚠️ Some routes failed to load: {e}")

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all exceptions with proper CORS headers"""
    from fastapi import HTTPException

    origin = request.headers.get("origin", "")
    headers = {}

    allowed_origins = dev_origins if settings.DEBUG else settings.cors_origins
    if origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Access-Control-Allow-Credentials"] = "true"

    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=headers
        )

    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": ErrorCode.INTERNAL_ERROR.value, "message": "Internal server error"}},
        headers=headers
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contract_analytics.core.config import settings
from contract_analytics.core.logging import setup_logger
from contract_analytics.api.analytics_routes import router as analytics_router
from contract_analytics.api.report_routes import router as report_router
from contract_analytics.core.db import initialize_database, close_engine, check_database_connection

# Initialize settings and logger
logger = setup_logger(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (prefixes are set on the routers)
app.include_router(analytics_router)
app.include_router(report_router)


@app.on_event("startup")
async def startup_event():
    """Initialize application and database on startup."""
    logger.info(f"{settings.APP_NAME} started in {settings.ENV} environment")

    try:
        await initialize_database(create_schema=settings.ENV == "development")
        logger.info("✅ Database initialized successfully")

    except Exception as e:
        logger.error(f"❌ Failed to initialize database: {str(e)}")
        logger.warning("Application starting without database. Analytics endpoints will fail until it is reachable.")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on shutdown."""
    logger.info("Shutting down application...")

    try:
        await close_engine()
        logger.info("✅ Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}")


@app.get("/health")
async def health_check():
    """Health check endpoint with database status."""
    db_available, db_error = await check_database_connection()

    return {
        "status": "ok",
        "database": {
            "available": db_available,
            "error": db_error
        }
    }

# mentor_matching/main.py
import logging
from fastapi import FastAPI
from sqlalchemy import text

from .config import get_settings
from .database import create_db_and_tables, SessionLocal
from .routers import matching_router

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mentor-Mentee Matching Request API",
    description="Matching-request lifecycle for a mentor/mentee platform: create, accept, reject, cancel and list.",
    version="1.0.0",
)

# Include routers
app.include_router(matching_router.router)

@app.on_event("startup")
def startup_event():
    """Initialize application on startup"""
    logger.info("Application startup event triggered.")
    create_db_and_tables()
    logger.info("Startup sequence completed successfully.")

@app.get("/health")
def health_check():
    """Health check endpoint"""
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
            db.commit()
        return {"status": "healthy", "database": "ok"}
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}

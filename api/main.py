"""
Main API application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.applications_api import router as applications_router
from api.screening_api import router as screening_router
from api.shared import LOG_LEVEL, get_question_bank

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("Starting server - loading question bank...")

    try:
        bank = get_question_bank()
        counts = bank.count_by_division()
        logger.info("Loaded %d questions: %s", len(bank), counts)
    except Exception:
        logger.exception("Error loading question bank")
        raise

    yield

    logger.info("Shutting down server...")


app = FastAPI(
    title="Club Admission Screening API",
    description="Screening exam, attempt limits and membership applications for the club join flow",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(screening_router)
app.include_router(applications_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Club Admission Screening API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

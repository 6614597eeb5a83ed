import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ✅ Import All API Routes
from ats_portal.api.routes import auth, jobs, submissions, resume, applicant, health

from ats_portal.core.config import CORS_ORIGINS, LOG_LEVEL
from ats_portal.core.logging_config import setup_logging
from ats_portal.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    init_db()
    logger.info("ATS Portal API started")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="ATS Portal", lifespan=lifespan)

# ✅ CORS: origins come from CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(jobs.router)
app.include_router(submissions.router)
app.include_router(resume.router)
app.include_router(applicant.router)
app.include_router(health.router)


# ============================================
# ✅ HEALTH CHECK ROOT ENDPOINT
# ============================================

@app.get("/")
def root():
    return {"status": "ATS Portal API running"}

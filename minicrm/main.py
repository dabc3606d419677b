"""
Mini CRM - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from minicrm.config import settings
from minicrm.database import init_db
from minicrm.core.exceptions import MiniCRMException, minicrm_exception_handler
from minicrm.schemas.common import HealthResponse

# Import all API routers
from minicrm.api import auth, workspaces, stages, leads, campaigns, messages, dashboard

# Import models to ensure they are registered with SQLModel
from minicrm.models import (
    User, Workspace, WorkspaceMember,
    PipelineStage, StageRequiredField,
    Lead, LeadCustomField, LeadCustomValue,
    Campaign, GeneratedMessage
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    await init_db()
    yield
    # Shutdown


app = FastAPI(
    title="Mini CRM API",
    description="Multi-tenant SDR pipeline with stage-triggered AI outreach drafts",
    version="1.0.0",
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MiniCRMException, minicrm_exception_handler)

# Include all routers
app.include_router(auth.router)
app.include_router(workspaces.router)
app.include_router(stages.router)
app.include_router(leads.router)      # Leads and custom fields
app.include_router(campaigns.router)
app.include_router(messages.router)   # Generation endpoint and drafts
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Mini CRM API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse(status="healthy", version="1.0.0")

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import engine, Base
from shared.helpers.exception_handler import setup_exception_handlers

from .models.membership import providers, join_requests, organization_members
from .models.gate_pass import invitations, premises
from .models.system import notifications
from .router.membership import providers_router, organizations_router
from .router.gate_pass import invitations_router, premises_router
from .router.system import inbox_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Karibu Community Service API")

# Create all tables
Base.metadata.create_all(bind=engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(providers_router.router)
app.include_router(organizations_router.router)
app.include_router(invitations_router.router)
app.include_router(premises_router.router)
app.include_router(inbox_router.router)


@app.get("/api/health")
def health():
    return {"status": "healthy"}

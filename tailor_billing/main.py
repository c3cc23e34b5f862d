import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tailor_billing.config import settings
from tailor_billing.database import Base, engine
from tailor_billing.routes import bills, customers
from tailor_billing.routes import settings as settings_routes

logging.basicConfig(level=settings.LOG_LEVEL)

# Create app
app = FastAPI(title="Tailor Shop Billing")

# -------------------------------------------------
# CORS (admin screens)
# -------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------------------------------
# API Routes
# -------------------------------------------------
app.include_router(customers.router)
app.include_router(bills.router)
app.include_router(settings_routes.router)

# -------------------------------------------------
# Global Health Check
# -------------------------------------------------
@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "services": {
            "api": "ok"
        }
    }

# Create DB tables
Base.metadata.create_all(bind=engine)

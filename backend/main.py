from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from database import Base, engine
from datetime import datetime
import os
import logging
from fastapi.openapi.utils import get_openapi

import models  # noqa: F401  registers every table on Base.metadata
import routers.stock as stock
import routers.billing as billing
import routers.payments as payments
import routers.alerts as alerts
import routers.predictions as predictions
import routers.app_config as app_config
from settings import LOG_DIR, CORS_ALLOWED_ORIGINS, ENABLE_SCHEDULER


os.makedirs(LOG_DIR, exist_ok=True) # Create the log directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Medical Supplies Inventory & Billing API",
        version="1.0.0",
        description="Stock, billing and customer ledger API for a medical supplies store",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(stock.router, prefix="/api")
app.include_router(billing.router, prefix="/api")
app.include_router(payments.router, prefix="/api")
app.include_router(alerts.router, prefix="/api")
app.include_router(predictions.router, prefix="/api")
app.include_router(app_config.router, prefix="/api")


@app.get("/")
async def test_route():
    return {"message": "Medical supplies inventory & billing API"}


if ENABLE_SCHEDULER:
    from scheduler import scheduler

    @app.on_event("startup")
    def start_scheduler():
        scheduler.start()
        logger.info("End-of-day scheduler started")

    @app.on_event("shutdown")
    def stop_scheduler():
        scheduler.shutdown(wait=False)

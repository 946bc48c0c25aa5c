from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import get_database, close_database
from app.routes import vehicles, fuel, reminders, trips, push, notifications
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fuel Tracker API",
    description="Fuel logs, service reminders and trip costs for your vehicles",
    version="1.0.0"
)

# Add CORS middleware - must be added first for proper request handling
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Include routers
app.include_router(vehicles.router)
app.include_router(fuel.router)
app.include_router(reminders.router)
app.include_router(trips.router)
app.include_router(push.router)
app.include_router(notifications.router)


# Lifecycle events
@app.on_event("startup")
async def startup():
    logger.info("Starting Fuel Tracker API")
    # Initialize database connection
    get_database()


@app.on_event("shutdown")
async def shutdown():
    logger.info("Shutting down Fuel Tracker API")
    close_database()


@app.get("/", tags=["root"])
async def root():
    return {
        "message": "Welcome to Fuel Tracker API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["health"])
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

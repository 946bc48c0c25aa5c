import logging
from pymongo import MongoClient
from pymongo.errors import ServerSelectionTimeoutError
from dotenv import load_dotenv
from app.config import settings

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

client = None
db = None


# Lazy initialization - only connect when needed
def _connect_to_database():
    """Internal function to establish database connection"""
    global client, db

    if db is not None:
        return db  # Already connected

    try:
        logger.info(f"Attempting to connect to MongoDB: {settings.mongodb_url[:50]}...")
        client = MongoClient(
            settings.mongodb_url,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=10000,
            retryWrites=True,
            tz_aware=True
        )

        # Test connection
        client.admin.command("ping")
        logger.info("MongoDB connected successfully")
        db = client[settings.database_name]
        return db

    except ServerSelectionTimeoutError as e:
        logger.error(f"MongoDB connection timeout: {e}")
        raise RuntimeError(
            "Database not connected. Make sure MongoDB is running and "
            "MONGODB_URL in .env is reachable."
        )


def get_database():
    """Return the database instance (lazy initialization)"""
    global db

    if db is None:
        _connect_to_database()

    return db


def close_database():
    """Close the MongoDB connection"""
    global client, db
    if client:
        client.close()
        logger.info("MongoDB connection closed")
    client = None
    db = None


def database_connector():
    """Dependency handing out the connect function itself, for callers that connect on their own terms"""
    return get_database

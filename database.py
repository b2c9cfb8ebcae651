from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from logging_config import get_logger
from config import Config
import certifi

logger = get_logger("database")


def create_client(cfg: Config) -> AsyncIOMotorClient:
    """Build the process-wide Motor client. Called once from the app lifespan."""
    uri = cfg.MONGO_URI
    if not uri:
        logger.error("MONGO_URI not found in configuration!")
        raise ValueError("MONGO_URI is required")

    logger.info(f"MongoDB connection string found: {uri[:20]}...")
    if cfg.ENV == "production":
        return AsyncIOMotorClient(uri, tlsCAFile=certifi.where())
    return AsyncIOMotorClient(uri)


def get_database(client: AsyncIOMotorClient, cfg: Config) -> AsyncIOMotorDatabase:
    db = client[cfg.DB_NAME]
    logger.info(f"Database collections initialized on DB: {cfg.DB_NAME}")
    return db

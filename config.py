import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class Config:
    # --- MongoDB ---
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/")
    DB_NAME = os.getenv("DB_NAME", "taskhub")

    # --- Environment: "development", "testing" or "production" ---
    ENV = os.getenv("ENV", "development")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")  # CORS origin in production

    # --- Bearer tokens ---
    # Must match the key the identity provider signs with
    SECRET_KEY = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        if ENV == "production":
            raise ValueError("SECRET_KEY environment variable is mandatory in production!")
        SECRET_KEY = "dev_secret_key_change_in_prod"
    ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = _int_env("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7)

    # --- Listing ---
    DEFAULT_PAGE_SIZE = _int_env("DEFAULT_PAGE_SIZE", 10)
    MAX_PAGE_SIZE = _int_env("MAX_PAGE_SIZE", 100)

    # --- Reminders: look-ahead for the single task-reminder per due date ---
    REMINDER_WINDOW_HOURS = _int_env("REMINDER_WINDOW_HOURS", 24)

config = Config()

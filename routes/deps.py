from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from models.user import UserModel
from errors import AuthenticationError, DependencyFailure
from logging_config import get_logger, user_id_var, role_var
from services.task_lifecycle import TaskLifecycleCoordinator
from config import config

logger = get_logger("auth")

# Config from central config
SECRET_KEY = config.SECRET_KEY
ALGORITHM = config.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = config.ACCESS_TOKEN_EXPIRE_MINUTES

# Tokens are issued by the identity provider; this only reads the bearer header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


async def get_db(request: Request) -> AsyncIOMotorDatabase:
    """The database handle created once at startup (see main.lifespan)."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        logger.error("Database handle requested before startup completed")
        raise DependencyFailure("Database unavailable")
    return db


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncIOMotorDatabase = Depends(get_db),
) -> UserModel:
    if not token:
        raise AuthenticationError("Authentication required. Please sign in.")
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            logger.warning("Token decoded but missing 'sub' claim")
            raise AuthenticationError("Invalid or expired token. Please sign in again.")
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise AuthenticationError("Invalid or expired token. Please sign in again.")

    user = await db.users.find_one({"id": user_id})
    if user is None:
        logger.warning(f"Token valid but user not found in DB", extra={"data": {"user_id": user_id}})
        raise AuthenticationError("User not found. Please sign in again.")

    current_user = UserModel(**user)
    if not current_user.active:
        logger.warning(f"Login refused: account disabled", extra={"data": {"user_id": user_id}})
        raise AuthenticationError("Your account has been disabled.")

    user_id_var.set(current_user.id)
    role_var.set(current_user.role)
    return current_user


def get_coordinator(db: AsyncIOMotorDatabase = Depends(get_db)) -> TaskLifecycleCoordinator:
    return TaskLifecycleCoordinator(db)

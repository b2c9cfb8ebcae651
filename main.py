from logging_config import setup_logging

# Initialize logging BEFORE anything else
setup_logging()

from contextlib import asynccontextmanager
from logging_config import get_logger
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException
from middleware import RequestLifecycleMiddleware
from routes import tasks, auth, notifications, users
from errors import ServiceError, DependencyFailure
from database import create_client, get_database
from config import config

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One client per process, handed to every request through routes.deps.get_db
    client = create_client(config)
    app.state.db = get_database(client, config)
    try:
        yield
    finally:
        client.close()


app = FastAPI(title="TaskHub API", lifespan=lifespan)

# CORS remains here as it's a global setting
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL] if config.ENV == "production" else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request lifecycle middleware (request ID, context vars, duration logging)
app.add_middleware(RequestLifecycleMiddleware)


# --- ERROR CONTRACT: {"error": true, "message": ...} ---

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": True, "message": message, "errors": errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": True, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Store failure: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content=DependencyFailure("Database unavailable").to_dict())


# REGISTER ROUTERS
app.include_router(auth.router)
app.include_router(tasks.router)
app.include_router(notifications.router)
app.include_router(users.router)

logger.info("All routers registered, TaskHub API ready")

@app.get("/")
async def root():
    return {"status": "online", "message": "TaskHub API is running"}

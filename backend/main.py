# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db
from utils.exceptions import PortalError, StoreError, StoreUnavailableError
from utils.logging_config import setup_logging

# Router imports
from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.achievements import router as achievements_router
from routes.search import router as search_router
from routes.stats import router as stats_router
from routes.logs import router as logs_router

setup_logging()
logger = logging.getLogger(__name__)

# Initialization
init_db()

app = FastAPI(title="Faculty Achievement Portal API", version="1.0.0")

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# === Error translation: every failure is {"error": "..."} ===

@app.exception_handler(PortalError)
def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def _field_name(loc) -> str:
    # ("body", "certificateYear") -> "certificateYear"; ("query", "page") -> "page"
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


def _clean_message(msg: str) -> str:
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        fields.setdefault(_field_name(err.get("loc", ())), _clean_message(err.get("msg", "Invalid value")))
    return JSONResponse(status_code=400, content={"error": "Validation failed", "fields": fields})


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
def store_error_handler(request: Request, exc: SQLAlchemyError):
    # Details stay in the server log
    logger.exception("Store error on %s %s", request.method, request.url.path)
    if isinstance(exc, (OperationalError, PoolTimeoutError)):
        error = StoreUnavailableError()
    else:
        error = StoreError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Register routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(achievements_router)
app.include_router(search_router)
app.include_router(stats_router)
app.include_router(logs_router)


@app.get("/")
def read_root():
    return {"message": "Faculty Achievement Portal API"}


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from dotenv import load_dotenv

# Load env vars before anything else
load_dotenv()

from tinigom.core.config import settings
from tinigom.database import engine, Base, SessionLocal
from tinigom.models import finance  # noqa: F401  (registers tables on Base)
from tinigom.routers import health, invoices, progress, quotes, todos, transactions
from tinigom.routers import settings as settings_router
from tinigom.services.gateway import PersistenceGateway

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json"
)


@app.on_event("startup")
def init_data():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        logger.info("Initializing system data...")
        PersistenceGateway(db).ensure_settings(settings.DEFAULT_SAVINGS_GOAL, settings.INVOICE_START_NUMBER)
    except Exception as e:
        logger.error(f"Error initializing settings: {e}")
    finally:
        db.close()

    logger.info(f"--- {settings.PROJECT_NAME} READY (quotes: {settings.QUOTE_STRATEGY}) ---")


def _validation_message(exc: RequestValidationError) -> str:
    missing = [str(err["loc"][-1]) for err in exc.errors() if err["type"] == "missing"]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    err = exc.errors()[0]
    field = ".".join(str(part) for part in err["loc"] if part not in ("body", "query"))
    message = err["msg"].removeprefix("Value error, ")
    return f"Invalid {field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _validation_message(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(transactions.router, prefix=f"{settings.API_PREFIX}/transactions")
app.include_router(settings_router.router, prefix=f"{settings.API_PREFIX}/settings")
app.include_router(todos.router, prefix=f"{settings.API_PREFIX}/todos")
app.include_router(invoices.router, prefix=f"{settings.API_PREFIX}/invoices")
app.include_router(quotes.router, prefix=settings.API_PREFIX)
app.include_router(progress.router, prefix=settings.API_PREFIX)
app.include_router(health.router, prefix=settings.API_PREFIX)

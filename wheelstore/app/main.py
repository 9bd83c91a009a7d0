# wheelstore/app/main.py
from dotenv import load_dotenv

load_dotenv(override=True)
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from wheelstore.settings import settings
from wheelstore.authoring.errors import AuthoringError, StorageError
from wheelstore.app.features.products.api import router as products_router
from wheelstore.app.features.images.api import router as images_router
from wheelstore.app.features.catalog.api import router as catalog_router
from wheelstore.app.features.dashboard.api import router as dashboard_router
from wheelstore.app.features.contact.api import router as contact_router
from wheelstore.db.automigrate import apply_migrations_safely, ensure_tables_exist
from wheelstore.db.session import build_engine, build_session_factory
from wheelstore.db.url import get_sqlalchemy_url
from wheelstore.services.mail_service import OutboxMailer
from wheelstore.services.storage_service import S3ImageStorage

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    url = get_sqlalchemy_url()
    engine = build_engine(url)

    # Apply DB migrations automatically before serving
    apply_migrations_safely(url)
    ensure_tables_exist(engine)

    app.state.session_factory = build_session_factory(engine)
    app.state.image_storage = S3ImageStorage.from_settings(settings)
    app.state.mailer = OutboxMailer(settings.MAIL_FROM)
    logger.info("Serving bucket %s", settings.AWS_S3_PRODUCT_IMAGES_BUCKET)
    yield
    engine.dispose()


app = FastAPI(lifespan=lifespan)
app.include_router(products_router)
app.include_router(images_router)
app.include_router(catalog_router)
app.include_router(dashboard_router)
app.include_router(contact_router)


@app.get("/")
async def root():
    return {"message": "Wheelstore API"}


@app.exception_handler(StorageError)
async def storage_error_handler(_: Request, exc: StorageError):
    logger.warning("Storage failure: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(AuthoringError)
async def authoring_error_handler(_: Request, exc: AuthoringError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from sharebox.core.config import Settings, get_settings
from sharebox.core.errors import InvalidOperation, ShareboxError, StorageError
from sharebox.core.storage import Storage, build_storage
from sharebox.models import Base
from sharebox.models.database import make_engine, make_session_factory
from sharebox.routers import admin, auth, files
from sharebox.services.auth import seed_admin

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = make_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    session_factory = make_session_factory(engine)

    with session_factory() as db:
        seed_admin(db, settings)

    app = FastAPI(title="Sharebox")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.storage = storage or build_storage(settings)

    @app.exception_handler(ShareboxError)
    async def sharebox_error_handler(request: Request, exc: ShareboxError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # loc is ("body", "file_id") etc, report the field names only
        fields = sorted({".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]) for err in exc.errors()})
        error = InvalidOperation(f"Invalid or missing fields: {', '.join(fields)}")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
        error = StorageError("Internal server error.")
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # include our routers
    app.include_router(auth.router)
    app.include_router(files.router)
    app.include_router(admin.router)

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "File Sharing App Backend is running!"

    return app

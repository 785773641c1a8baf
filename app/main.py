import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _seed_admin_user() -> None:
    """Create the configured admin user if it does not exist yet."""
    from app.database import SessionLocal
    from app.services.auth_service import asegurar_admin

    db = SessionLocal()
    try:
        asegurar_admin(db, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Could not seed admin user on startup: %s", exc)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    _seed_admin_user()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "app": settings.APP_NAME}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from app.routers import auth  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])

# Excel upload + table browsing
from app.routers import tablas  # noqa: E402

app.include_router(tablas.router, prefix=settings.API_PREFIX, tags=["Tablas"])

# Pipeline stages, snapshot load and working table
from app.routers import ejecucion  # noqa: E402

app.include_router(
    ejecucion.router,
    prefix=f"{settings.API_PREFIX}/ejecucion",
    tags=["Ejecución"],
)

# Dashboard statistics
from app.routers import estadisticas  # noqa: E402

app.include_router(
    estadisticas.router,
    prefix=f"{settings.API_PREFIX}/estadisticas",
    tags=["Estadísticas"],
)

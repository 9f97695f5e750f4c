import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from . import repo
from .config import LOG_LEVEL, SEED_ON_STARTUP
from .database import SessionLocal, init_db
from .routes import include_modular_routers
from .services.seeding import seed_fake_profiles

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Deep Love API")
include_modular_routers(app)

# Credentials mode needs explicit origins, not "*".
ALLOWED_ORIGINS = [
    "http://localhost:5000",
    "http://127.0.0.1:5000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def wait_for_db(max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with SessionLocal() as db:
                db.execute(text("SELECT 1"))
                db.commit()
            return
        except OperationalError as exc:
            last_err = exc
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


def seed_if_empty(n_profiles: int) -> None:
    if n_profiles <= 0:
        return
    if repo.count_profiles() > 0:
        logger.info("Database already has profiles, skipping seed")
        return
    with SessionLocal() as db:
        summary = seed_fake_profiles(db, n_profiles=n_profiles)
    logger.info("Seeded %s profiles", summary["profiles_created"])


@app.on_event("startup")
def on_startup() -> None:
    wait_for_db()
    init_db()
    seed_if_empty(SEED_ON_STARTUP)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}

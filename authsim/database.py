import logging
import os
from datetime import date
from threading import Lock

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {}
    options = {"connect_args": {"check_same_thread": False}}
    # A memory database only lives as long as its connection, so every
    # session has to share the same one.
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

logger = logging.getLogger(__name__)

_seed_lock = Lock()
_demo_users_seeded = False

DEMO_USERS = [
    {
        "name": "Demo Admin",
        "email": "admin@example.com",
        "password": "password123",
        "role": "admin",
        "created_at": date(2024, 1, 15),
    },
    {
        "name": "John Doe",
        "email": "john@example.com",
        "password": "demo123",
        "role": "user",
        "created_at": date(2024, 2, 20),
    },
]


def ensure_demo_users() -> None:
    global _demo_users_seeded

    if _demo_users_seeded:
        return

    with _seed_lock:
        if _demo_users_seeded:
            return

        from authsim.auth.passwords import encode_password
        from authsim.models.user import User

        db = SessionLocal()
        try:
            for demo in DEMO_USERS:
                if db.query(User).filter(User.email == demo["email"]).first():
                    continue
                db.add(
                    User(
                        name=demo["name"],
                        email=demo["email"],
                        hashed_password=encode_password(demo["password"]),
                        role=demo["role"],
                        created_at=demo["created_at"].isoformat(),
                    )
                )
                logger.info("Seeded demo account %s", demo["email"])
            db.commit()
        finally:
            db.close()

        _demo_users_seeded = True

import importlib
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from brewhaven.config import settings

log = logging.getLogger("db")

DATABASE_URL = settings.DATABASE_URL
_is_sqlite = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=False,
    connect_args={"check_same_thread": False, "timeout": 30} if _is_sqlite else {},
)

if _is_sqlite:

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Every module declaring tables; imported before create_all so metadata is complete.
MODEL_MODULES = [
    "brewhaven.models.product",
    "brewhaven.models.order",
    "brewhaven.models.profile",
    "brewhaven.models.cart",
    "brewhaven.models.chat",
    "brewhaven.models.idempotency",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    With reset=True all tables are dropped and recreated (tests, RESET_DB=1).
    Otherwise missing tables are created and existing ones are left alone.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.warning("Resetting database schema at %s", DATABASE_URL)
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    log.info("Database initialized (%d tables)", len(Base.metadata.tables))


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

import logging

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.validate_database_configuration()
_IS_SQLITE = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if _IS_SQLITE else {},
    echo=False,
)


if _IS_SQLITE:
    # SQLite leaves foreign keys off unless asked; cascades depend on them.
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_startup_migrations() -> None:
    """Bring databases created by earlier schema revisions up to date."""
    inspector = inspect(engine)

    def _table_columns(table_name: str) -> set[str]:
        try:
            return {col["name"] for col in inspector.get_columns(table_name)}
        except Exception:
            return set()

    glucose_columns = _table_columns("glucose_logs")
    if not glucose_columns:
        # Tables may not exist yet on first boot.
        return

    with engine.begin() as conn:
        if "notes" not in glucose_columns:
            conn.execute(text("ALTER TABLE glucose_logs ADD COLUMN notes TEXT"))
            logger.info("Added glucose_logs.notes column")
        # Older rows used the short spelling for the no-meal tag.
        result = conn.execute(text("UPDATE glucose_logs SET meal_type = 'NoMeal' WHERE meal_type = 'No'"))
        if result.rowcount:
            logger.info("Normalized %s legacy meal_type values", result.rowcount)

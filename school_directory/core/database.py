import os
from typing import Iterator

from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy import BigInteger, Integer, create_engine, event, text
from sqlalchemy.engine import URL
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from school_directory.core.logger import get_logger

load_dotenv()

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY.
BigIntId = BigInteger().with_variant(Integer, "sqlite")

logger = get_logger(__name__)


def database_url_from_env() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return URL.create(
        "mysql+pymysql",
        username=os.getenv("DB_USER"),
        password=os.getenv("DB_PASS"),
        host=os.getenv("DB_HOST", "localhost"),
        port=int(os.getenv("DB_PORT", "3306")),
        database=os.getenv("DB_NAME"),
    ).render_as_string(hide_password=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE actions unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the engine (and its connection pool) for one application instance."""

    def __init__(self, url: str | None = None):
        self.url = url or database_url_from_env()
        if self.url.startswith("sqlite"):
            self.engine = create_engine(
                self.url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        else:
            self.engine = create_engine(
                self.url,
                pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
                pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "1800")),
                pool_timeout=15,
                pool_pre_ping=True,
            )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_schema(self) -> None:
        # Models must be imported so their tables are registered on Base.metadata.
        from school_directory.models import otp, school, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("database_schema_ready", dialect=self.engine.dialect.name)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        return self._session_factory()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("database_disposed")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

"""SQLAlchemy models for spendtrack database."""

from datetime import datetime, UTC
from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String(500), nullable=False)
    category = Column(String(100), nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Natural key used for duplicate detection
    __table_args__ = (
        UniqueConstraint("date", "amount", "description", name="uq_transactions_natural_key"),
        CheckConstraint("length(description) > 0", name="ck_transactions_description_not_empty"),
        CheckConstraint("length(description) <= 500", name="ck_transactions_description_length"),
        CheckConstraint(
            "category IS NULL OR length(category) <= 100", name="ck_transactions_category_length"
        ),
    )


class ImportSession(Base):
    """Import session model."""

    __tablename__ = "import_sessions"

    id = Column(Integer, primary_key=True)
    filename = Column(String(255), nullable=False, index=True)
    started_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    total_rows = Column(Integer, default=0, nullable=False)
    imported_count = Column(Integer, default=0, nullable=False)
    duplicate_count = Column(Integer, default=0, nullable=False)
    error_count = Column(Integer, default=0, nullable=False)
    status = Column(String(16), default="pending", nullable=False, index=True)
    error_message = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("total_rows >= 0", name="ck_import_sessions_total_rows"),
        CheckConstraint(
            "imported_count >= 0 AND duplicate_count >= 0 AND error_count >= 0",
            name="ck_import_sessions_counts_non_negative",
        ),
        CheckConstraint(
            "imported_count + duplicate_count + error_count <= total_rows",
            name="ck_import_sessions_counts_within_total",
        ),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')", name="ck_import_sessions_status"
        ),
    )


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs nest correctly."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)

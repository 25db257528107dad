"""Database engine, session factory and the swap record table."""
import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, String, UniqueConstraint, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    pass


class DecimalString(TypeDecorator):
    """Exact Decimal stored as text; SQLite numerics would round through float."""
    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class SwapRecordRow(Base):
    __tablename__ = "swap_records"
    __table_args__ = (
        UniqueConstraint("signature", "type", name="uq_swap_records_signature_type"),
        # 'both' only admits rows written before split storage existed
        CheckConstraint("type IN ('buy', 'sell', 'both')", name="ck_swap_records_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    signature: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(8), nullable=False)
    classification_source: Mapped[str] = mapped_column(String(32), nullable=False)
    swapper: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    protocol: Mapped[str] = mapped_column(String(64), nullable=False, default="UNKNOWN")
    timestamp: Mapped[str | None] = mapped_column(String(40), nullable=True)

    buy_amount: Mapped[Decimal] = mapped_column(DecimalString, nullable=False)
    sell_amount: Mapped[Decimal] = mapped_column(DecimalString, nullable=False)
    buy_sol_amount: Mapped[Decimal | None] = mapped_column(DecimalString, nullable=True)
    sell_sol_amount: Mapped[Decimal | None] = mapped_column(DecimalString, nullable=True)

    token_in_mint: Mapped[str] = mapped_column(String(64), nullable=False)
    token_in_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_in_amount: Mapped[Decimal] = mapped_column(DecimalString, nullable=False)
    token_out_mint: Mapped[str] = mapped_column(String(64), nullable=False)
    token_out_symbol: Mapped[str | None] = mapped_column(String(32), nullable=True)
    token_out_amount: Mapped[Decimal] = mapped_column(DecimalString, nullable=False)

    confidence: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        default=lambda: datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None),
    )


def make_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite shares one connection so every session sees the
    same database.
    """
    if database_url == "sqlite://" or (database_url.startswith("sqlite") and ":memory:" in database_url):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    if database_url.startswith("sqlite"):
        # Route handlers run in a threadpool
        return create_engine(database_url, connect_args={"check_same_thread": False}, echo=False)
    return create_engine(database_url, echo=False)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create ORM tables; no-op for existing ones."""
    Base.metadata.create_all(bind=engine)

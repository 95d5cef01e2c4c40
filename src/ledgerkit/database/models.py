"""SQLAlchemy models for the ledgerkit database."""

from datetime import datetime, UTC
from decimal import Decimal
from sqlalchemy import (
    BigInteger,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class ScaledDecimal(TypeDecorator):
    """Decimal stored as a scaled integer.

    Keeps amounts exact in the database, including inside SUM aggregates,
    on backends (SQLite) that have no native decimal type.
    """

    impl = BigInteger
    cache_ok = True

    def __init__(self, scale: int = 4):
        super().__init__()
        self.scale = scale

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(Decimal(value).scaleb(self.scale).to_integral_value())

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(int(value)).scaleb(-self.scale)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LedgerAccountCategory(Base):
    """Category mapping a name to a ledger group."""

    __tablename__ = "ledger_account_categories"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    ledger_group = Column(String, nullable=False)
    ledger_sub_group = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_category_tenant_name"),)

    accounts = relationship("LedgerAccount", back_populates="category")


class LedgerAccount(Base):
    """Chart of accounts entry with optional parent."""

    __tablename__ = "ledger_accounts"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    number = Column(String, nullable=True)
    category_id = Column(Integer, ForeignKey("ledger_account_categories.id"), nullable=False)
    parent_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    currency = Column(String(3), nullable=False)
    system_account = Column(Boolean, default=False, nullable=False)
    editable = Column(Boolean, default=True, nullable=False)
    hidden = Column(Boolean, default=False, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    # Only set for well-known default accounts; NULLs do not collide.
    purpose = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "number", name="uq_account_tenant_number"),
        UniqueConstraint("tenant_id", "purpose", name="uq_account_tenant_purpose"),
    )

    category = relationship("LedgerAccountCategory", back_populates="accounts")
    parent = relationship("LedgerAccount", remote_side=[id], backref="children")


class LedgerTransactionGroup(Base):
    """Journal entry header."""

    __tablename__ = "ledger_transaction_groups"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    transaction_date = Column(Date, nullable=False)
    currency = Column(String(3), nullable=False)
    description = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    status = Column(String, nullable=False)
    reversal_of_id = Column(Integer, ForeignKey("ledger_transaction_groups.id"), nullable=True)
    reversed_by_id = Column(Integer, ForeignKey("ledger_transaction_groups.id"), nullable=True)
    posted_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    transactions = relationship(
        "LedgerTransaction",
        back_populates="group",
        order_by="LedgerTransaction.id",
    )


class LedgerTransaction(Base):
    """Single- or double-entry ledger record."""

    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    entry_mode = Column(String, nullable=False)
    amount = Column(ScaledDecimal(4), nullable=False)
    currency = Column(String(3), nullable=False)
    exchange_rate = Column(ScaledDecimal(8), nullable=False)
    base_amount = Column(ScaledDecimal(4), nullable=False)
    transaction_date = Column(Date, nullable=False)
    ledger_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    transaction_state = Column(String, nullable=True)
    debit_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    credit_account_id = Column(Integer, ForeignKey("ledger_accounts.id"), nullable=True)
    verified = Column(Boolean, default=False, nullable=False)
    verified_by = Column(String, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)
    description = Column(String, nullable=True)
    related_to_type = Column(String, nullable=True)
    related_to_id = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    group_id = Column(Integer, ForeignKey("ledger_transaction_groups.id"), nullable=True)
    reversal_of_id = Column(Integer, ForeignKey("ledger_transactions.id"), nullable=True)
    reversed_by_id = Column(Integer, ForeignKey("ledger_transactions.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_txn_tenant_date", "tenant_id", "transaction_date", "id"),
        Index("ix_txn_related_to", "tenant_id", "related_to_type", "related_to_id"),
    )

    group = relationship("LedgerTransactionGroup", back_populates="transactions")


class Voucher(Base):
    """Approval wrapper composed over one ledger transaction."""

    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    transaction_id = Column(Integer, ForeignKey("ledger_transactions.id"), nullable=False, unique=True)
    voucher_type = Column(String, nullable=False)
    voucher_to = Column(String, nullable=False)
    beneficiary_name = Column(String, nullable=True)
    reference = Column(String, nullable=True)
    status = Column(String, nullable=False)
    version = Column(Integer, default=1, nullable=False)
    approved_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    transaction = relationship("LedgerTransaction")


class LedgerHalt(Base):
    """Present while automated posting is halted for a tenant."""

    __tablename__ = "ledger_halts"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, unique=True)
    reason = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    module = type(dbapi_connection).__module__
    if module.startswith("sqlite3") or module.startswith("pysqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory and make sure the schema exists."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are opened per operation from several threads; wait on
        # locks instead of failing immediately.
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)

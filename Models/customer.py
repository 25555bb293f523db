# Models/customer.py
from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, text
from sqlalchemy.sql import func
from datetime import datetime, timezone
from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Customer(Base):
    __tablename__ = 'customers'

    # Primary identifier (INTEGER PRIMARY KEY on SQLite so the rowid is used)
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    # Contact information, phone is the natural key
    name = Column(String, nullable=True)
    phone = Column(String, unique=True, nullable=False)

    # Account status
    active = Column(Boolean, nullable=False, default=True, server_default=text("true"))

    # Timestamps
    created = Column(DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now())

    def __repr__(self):
        return f"<Customer {self.id} {self.name} ({self.phone})>"

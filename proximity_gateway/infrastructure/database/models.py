"""SQLAlchemy ORM models for the location store tables read by the gateway"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

COMPLETED = "COMPLETED"


def _new_id() -> str:
    return str(uuid.uuid4())


class LocationModel(Base):
    """Physical place where payments were made"""

    __tablename__ = "location"
    __table_args__ = (Index("ix_location_lat_lon", "latitude", "longitude"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    country = Column(Text, nullable=True, default="Nigeria")
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    location_type = Column(Text, nullable=False, default="STORE")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    transactions = relationship(
        "TransactionModel",
        back_populates="location",
        order_by="TransactionModel.created_at.desc()",
    )


class AccountModel(Base):
    """Destination account of a transfer"""

    __tablename__ = "account"

    id = Column(String(36), primary_key=True, default=_new_id)
    account_number = Column(Text, nullable=False, index=True)
    bank_name = Column(Text, nullable=False)
    account_name = Column(Text, nullable=False)
    is_business = Column(Boolean, nullable=True)  # NULL: classify by name


class TransactionModel(Base):
    """Transfer, optionally tagged with the location it was made at"""

    __tablename__ = "transaction"

    id = Column(String(36), primary_key=True, default=_new_id)
    amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="PENDING")
    location_id = Column(String(36), ForeignKey("location.id", ondelete="SET NULL"), nullable=True, index=True)
    to_account_id = Column(String(36), ForeignKey("account.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    location = relationship("LocationModel", back_populates="transactions")
    to_account = relationship("AccountModel")


class UserPreferenceModel(Base):
    """Per-user notification switches"""

    __tablename__ = "user_notification_preference"

    user_id = Column(Text, primary_key=True)
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    location_notifications_enabled = Column(Boolean, nullable=False, default=True)

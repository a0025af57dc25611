"""
Database Models for the Car Wash Queue

This module defines the SQLModel database schemas for:
- Client: One record per license plate, with the owner's contact data
- Wash: One record per wash job, referencing a client by its custom id

Design Decisions:
- Client.id is a UUID string generated by the application, so callers can
  supply their own ids and washes can reference clients by value
- Wash.client_id is deliberately not a foreign key; the queue listing uses
  inner-join semantics and drops washes whose client is missing
- A partial unique index allows only one pending wash per plate
- Timestamps are naive server-local datetimes (queue days are local days)
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field, Column, Index
from sqlalchemy import String, DateTime, Float, text


class WashStatus(str, Enum):
    """Lifecycle states of a wash job."""
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"


PENDING_ONLY = text("status = 'pending'")


def new_client_id() -> str:
    """Generate a fresh client id."""
    return str(uuid.uuid4())


class Client(SQLModel, table=True):
    """
    Car owner registered at the wash.

    Fields:
    - id: Custom UUID string (primary key, referenced by Wash.client_id)
    - name / phone: Contact data, overwritten on every new registration
    - plate: License plate, unique across clients
    - car_model: Last reported car model
    - created_at: When the client was first registered

    Indexes:
    - plate: Unique index (natural key used by the registration upsert)
    - created_at: For newest-first listings
    """
    __tablename__ = "clients"

    id: str = Field(
        default_factory=new_client_id,
        sa_column=Column(String(36), primary_key=True)
    )
    name: Optional[str] = Field(default=None, sa_column=Column(String(120), nullable=True))
    phone: Optional[str] = Field(default=None, sa_column=Column(String(40), nullable=True))
    plate: str = Field(
        sa_column=Column(String(20), nullable=False, unique=True, index=True)
    )
    car_model: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False, index=True)
    )


class Wash(SQLModel, table=True):
    """
    A single wash job in the queue.

    Fields:
    - id: Auto-incrementing store id (used by status updates)
    - client_id: Custom id of the owning Client
    - plate / car_model: Copied from the client at registration time
    - price: Amount charged
    - entry_time: When the car entered the queue
    - delivery_time: Promised delivery; pending washes past it are swept to completed
    - status: pending, completed or cancelled (see WashStatus)
    - payment_method: Free text (money, card, pix, ...)

    Indexes:
    - uq_washes_pending_plate: At most one pending wash per plate
    - delivery_time: Queue ordering and day filter
    """
    __tablename__ = "washes"
    __table_args__ = (
        Index(
            "uq_washes_pending_plate",
            "plate",
            unique=True,
            sqlite_where=PENDING_ONLY,
            postgresql_where=PENDING_ONLY,
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: str = Field(sa_column=Column(String(36), nullable=False, index=True))
    plate: str = Field(sa_column=Column(String(20), nullable=False, index=True))
    car_model: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))
    price: float = Field(default=0.0, sa_column=Column(Float, nullable=False, default=0.0))
    entry_time: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False)
    )
    delivery_time: datetime = Field(sa_column=Column(DateTime, nullable=False, index=True))
    status: str = Field(
        default=WashStatus.pending.value,
        sa_column=Column(String(20), nullable=False, index=True)
    )
    payment_method: Optional[str] = Field(default=None, sa_column=Column(String(40), nullable=True))
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False)
    )

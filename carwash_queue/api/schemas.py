"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models: One explicit input struct per operation
- Response models: Define output structure
- JSON keys are camelCase (carModel, deliveryTime, ...); snake_case input is accepted too
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carwash_queue.db.models import WashStatus


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ClientCreate(CamelModel):
    """Request model for direct client creation."""
    id: Optional[str] = Field(None, description="Custom client id (UUID generated if omitted)")
    name: Optional[str] = None
    phone: Optional[str] = None
    plate: str = Field(..., min_length=1, description="License plate (unique)")
    car_model: Optional[str] = None


class ClientUpdate(CamelModel):
    """Request model for client updates; omitted fields are kept."""
    name: Optional[str] = None
    phone: Optional[str] = None
    plate: Optional[str] = Field(None, min_length=1)
    car_model: Optional[str] = None


class ClientResponse(CamelModel):
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    plate: str
    car_model: Optional[str] = None
    created_at: datetime


class ServiceRegistrationRequest(CamelModel):
    """Request model for registering a wash."""
    name: Optional[str] = None
    phone: Optional[str] = None
    plate: str = Field(..., min_length=1, description="License plate")
    car_model: Optional[str] = None
    wash_price: Optional[Union[str, float]] = Field(
        None,
        description="Localized price, e.g. 'R$ 1.234,56'"
    )
    delivery_time: datetime = Field(..., description="Promised delivery time (ISO 8601)")
    payment_method: Optional[str] = None


class WashResponse(CamelModel):
    id: int
    client_id: str
    plate: str
    car_model: Optional[str] = None
    price: float
    entry_time: datetime
    delivery_time: datetime
    status: WashStatus
    payment_method: Optional[str] = None
    created_at: datetime


class ServiceRegistrationResponse(CamelModel):
    """Response model for wash registration."""
    success: bool = True
    client: ClientResponse
    wash: WashResponse


class QueueEntryResponse(CamelModel):
    """One row of the operator queue: a wash joined with its client."""
    id: int
    plate: str
    car_model: Optional[str] = None
    price: float
    entry_time: datetime
    delivery_time: datetime
    status: WashStatus
    payment_method: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None


class StatusUpdateRequest(CamelModel):
    """Request model for status changes (validated against WashStatus by the service)."""
    status: str

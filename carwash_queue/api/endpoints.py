"""
FastAPI Endpoints for the Car Wash Queue

This module defines all REST API endpoints with minimal logic.
Endpoints only handle:
- Request validation (Pydantic models)
- Rate limiting
- Error handling and HTTP responses
- Delegating to service layer

All business logic is in services/client_service.py and services/wash_service.py.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Request, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_queue.api.schemas import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    QueueEntryResponse,
    ServiceRegistrationRequest,
    ServiceRegistrationResponse,
    StatusUpdateRequest,
    WashResponse,
)
from carwash_queue.db.session import get_session
from carwash_queue.services.client_service import ClientRegistryService
from carwash_queue.services.wash_service import WashQueueService
from carwash_queue.core.exceptions import (
    CarWashQueueException,
    ConflictError,
    DatabaseError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from carwash_queue.core.rate_limit import limiter, RATE_LIMITS


router = APIRouter()


def to_http_exception(error: Exception) -> HTTPException:
    """
    Translate a service error into the HTTP error returned to the caller.

    Unexpected errors become 500 with their message exposed.
    """
    if isinstance(error, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, StoreUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    if isinstance(error, (DatabaseError, CarWashQueueException)):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unexpected error: {str(error)}"
    )


# --- Clients ---

@router.post(
    "/clients",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
    description="Inserts a client as given; an id is generated when omitted"
)
@limiter.limit(RATE_LIMITS["client_write"])
async def create_client(
    request: Request,  # Required for rate limiting (slowapi expects parameter named 'request')
    body: ClientCreate,
    session: AsyncSession = Depends(get_session)
) -> ClientResponse:
    try:
        client = await ClientRegistryService(session).create(body.model_dump())
        return ClientResponse.model_validate(client)
    except Exception as e:
        raise to_http_exception(e)


@router.get(
    "/clients",
    response_model=list[ClientResponse],
    summary="List clients",
    description="Returns every client, most recently created first"
)
async def list_clients(session: AsyncSession = Depends(get_session)) -> list[ClientResponse]:
    try:
        clients = await ClientRegistryService(session).list_clients()
        return [ClientResponse.model_validate(client) for client in clients]
    except Exception as e:
        raise to_http_exception(e)


@router.get(
    "/clients/search",
    response_model=list[ClientResponse],
    summary="Search clients",
    description="Case-insensitive match on name, plate, phone or car model"
)
async def search_clients(
    q: Optional[str] = Query(None, description="Text to look for"),
    session: AsyncSession = Depends(get_session)
) -> list[ClientResponse]:
    try:
        clients = await ClientRegistryService(session).search(q)
        return [ClientResponse.model_validate(client) for client in clients]
    except Exception as e:
        raise to_http_exception(e)


@router.put(
    "/clients/{client_id}",
    response_model=ClientResponse,
    summary="Update a client",
    description="Updates name, phone, plate and car model of the client with this custom id"
)
@limiter.limit(RATE_LIMITS["client_write"])
async def update_client(
    client_id: str,
    request: Request,
    body: ClientUpdate,
    session: AsyncSession = Depends(get_session)
) -> ClientResponse:
    """
    Raises:
        HTTPException 404: If no client has this id
        HTTPException 409: If the new plate belongs to another client
    """
    try:
        client = await ClientRegistryService(session).update_by_id(client_id, body.model_dump())
        return ClientResponse.model_validate(client)
    except Exception as e:
        raise to_http_exception(e)


# --- Services (wash queue) ---

@router.post(
    "/services",
    response_model=ServiceRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a wash",
    description="Creates or refreshes the client for the plate and queues a pending wash"
)
@limiter.limit(RATE_LIMITS["register"])
async def register_service(
    request: Request,
    body: ServiceRegistrationRequest,
    session: AsyncSession = Depends(get_session)
) -> ServiceRegistrationResponse:
    """
    Register a new wash.

    Returns:
        ServiceRegistrationResponse with the client and the created wash

    Raises:
        HTTPException 400: If car model or price is invalid
        HTTPException 409: If the plate already has a pending wash
        HTTPException 500: On store failures
    """
    try:
        client, wash = await WashQueueService(session).register_service(
            name=body.name,
            phone=body.phone,
            plate=body.plate,
            car_model=body.car_model,
            price_text=body.wash_price,
            delivery_time=body.delivery_time,
            payment_method=body.payment_method
        )
        return ServiceRegistrationResponse(
            success=True,
            client=ClientResponse.model_validate(client),
            wash=WashResponse.model_validate(wash)
        )
    except Exception as e:
        raise to_http_exception(e)


@router.get(
    "/services",
    response_model=list[QueueEntryResponse],
    summary="List the wash queue",
    description="Completes overdue pending washes, then lists washes joined with their clients"
)
@limiter.limit(RATE_LIMITS["queue"])
async def list_services(
    request: Request,
    status_filter: Optional[str] = Query(
        None,
        alias="status",
        description="pending, completed, cancelled or 'all'; cancelled washes are hidden by default"
    ),
    day: Optional[date] = Query(None, alias="date", description="Delivery day (YYYY-MM-DD)"),
    session: AsyncSession = Depends(get_session)
) -> list[QueueEntryResponse]:
    try:
        entries = await WashQueueService(session).list_queue(status=status_filter, day=day)
        return [QueueEntryResponse.model_validate(entry) for entry in entries]
    except Exception as e:
        raise to_http_exception(e)


@router.patch(
    "/services/{wash_id}/status",
    response_model=WashResponse,
    summary="Change wash status",
    description="Sets pending, completed or cancelled on a wash"
)
async def update_service_status(
    wash_id: int,
    body: StatusUpdateRequest,
    session: AsyncSession = Depends(get_session)
) -> WashResponse:
    """
    Raises:
        HTTPException 400: If the status is unknown
        HTTPException 404: If no wash has this id
        HTTPException 409: If reopening would duplicate a pending wash
    """
    try:
        wash = await WashQueueService(session).update_status(wash_id, body.status)
        return WashResponse.model_validate(wash)
    except Exception as e:
        raise to_http_exception(e)

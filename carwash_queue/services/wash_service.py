"""
Wash Queue Service

This service handles the core business logic of the car wash queue:
- Registering a wash (validation, duplicate-pending guard, client upsert, insert)
- Sweeping overdue pending washes to completed
- Listing the queue joined with client data
- Explicit status transitions

Design Decisions:
- All input is validated before the first store round trip
- Registration runs in a single transaction: a failed insert also undoes
  the client upsert
- The pending-per-plate rule is checked up front for a friendly error and
  enforced by a partial unique index for concurrent registrations
- The sweep runs on every listing, so the queue never shows a pending wash
  whose delivery time has already passed
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_queue.core.exceptions import ConflictError, DatabaseError, NotFoundError
from carwash_queue.core.validators import (
    day_bounds,
    parse_price,
    parse_status,
    to_local_naive,
    validate_car_model,
)
from carwash_queue.db.models import Client, Wash, WashStatus
from carwash_queue.services.client_service import ClientRegistryService

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def pending_conflict(plate: str) -> ConflictError:
    return ConflictError(f"Car with plate '{plate}' already has a pending wash in the queue.")


class WashQueueService:
    """
    Core business logic for the wash queue.

    Separated from the API layer so it can be exercised directly with a
    session in tests.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.clients = ClientRegistryService(session)

    async def get_pending_by_plate(self, plate: str) -> Optional[Wash]:
        statement = (
            select(Wash)
            .where(Wash.plate == plate, Wash.status == WashStatus.pending.value)
            .limit(1)
        )
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def register_service(
        self,
        name: Optional[str],
        phone: Optional[str],
        plate: str,
        car_model: Optional[str],
        price_text: Optional[str],
        delivery_time: datetime,
        payment_method: Optional[str]
    ) -> tuple[Client, Wash]:
        """
        Register a wash for a car, creating or refreshing its client.

        Args:
            name: Owner name
            phone: Owner phone
            plate: License plate
            car_model: Car model (at most CAR_MODEL_MAX_LENGTH characters)
            price_text: Localized price such as "R$ 1.234,56" (empty means 0)
            delivery_time: Promised delivery time
            payment_method: Free text payment method

        Returns:
            Tuple of (client, wash)

        Raises:
            ValidationError: If car model or price is invalid
            ConflictError: If the plate already has a pending wash
            DatabaseError: If the store rejects the write
        """
        validate_car_model(car_model)
        price = parse_price(price_text)
        delivery_time = to_local_naive(delivery_time)

        if await self.get_pending_by_plate(plate):
            logger.info(f"Rejected registration for plate {plate}: pending wash exists")
            raise pending_conflict(plate)

        client = await self.clients.upsert_by_plate(
            name=name,
            phone=phone,
            plate=plate,
            car_model=car_model,
            commit=False
        )

        wash = Wash(
            client_id=client.id,
            plate=client.plate,
            car_model=client.car_model,
            price=price,
            entry_time=datetime.now(),
            delivery_time=delivery_time,
            status=WashStatus.pending.value,
            payment_method=payment_method
        )
        self.session.add(wash)

        try:
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(wash)
            await self.session.refresh(client)
        except IntegrityError as e:
            await self.session.rollback()
            logger.info(f"Concurrent registration for plate {plate} lost the race")
            raise pending_conflict(plate) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to register wash: {str(e)}", original_error=e) from e

        logger.info(f"Registered wash {wash.id} for plate {plate} (client {client.id})")
        return client, wash

    async def sweep_overdue(self, now: Optional[datetime] = None) -> int:
        """
        Mark pending washes whose delivery time has passed as completed.

        Args:
            now: Reference instant (defaults to the current local time)

        Returns:
            Number of washes that changed status
        """
        now = now or datetime.now()
        statement = (
            update(Wash)
            .where(
                Wash.status == WashStatus.pending.value,
                Wash.delivery_time < now
            )
            .values(status=WashStatus.completed.value)
            .execution_options(synchronize_session="evaluate")
        )
        result = await self.session.execute(statement)
        await self.session.commit()

        swept = result.rowcount or 0
        if swept:
            logger.info(f"Sweep completed {swept} overdue wash(es)")
        return swept

    async def list_queue(
        self,
        status: Optional[str] = None,
        day: Optional[date] = None
    ) -> list[dict]:
        """
        Return the operator queue.

        Runs the overdue sweep first, then filters, joins each wash to its
        client (washes without a client are dropped), projects and sorts by
        delivery time ascending.

        Args:
            status: Exact status to show; "all" shows every status; None hides cancelled
            day: Calendar day the delivery time must fall in

        Returns:
            List of dictionaries with id, plate, car_model, price, entry_time,
            delivery_time, status, payment_method, client_name, client_phone

        Raises:
            ValidationError: If status is not a known state nor "all"
        """
        status_filter = None
        if status and status.strip().lower() != ALL_STATUSES:
            status_filter = parse_status(status)

        await self.sweep_overdue()

        statement = (
            select(
                Wash.id,
                Wash.plate,
                Wash.car_model,
                Wash.price,
                Wash.entry_time,
                Wash.delivery_time,
                Wash.status,
                Wash.payment_method,
                Client.name.label("client_name"),
                Client.phone.label("client_phone"),
            )
            .select_from(Wash)
            .join(Client, Client.id == Wash.client_id)
        )

        if not status:
            statement = statement.where(Wash.status != WashStatus.cancelled.value)
        elif status_filter is not None:
            statement = statement.where(Wash.status == status_filter.value)

        if day is not None:
            start, end = day_bounds(day)
            statement = statement.where(Wash.delivery_time >= start, Wash.delivery_time <= end)

        statement = statement.order_by(Wash.delivery_time.asc(), Wash.id.asc())
        result = await self.session.execute(statement)
        return [dict(row) for row in result.mappings().all()]

    async def update_status(self, wash_id: int, status) -> Wash:
        """
        Set the status of a wash.

        Raises:
            ValidationError: If status is not a known state
            NotFoundError: If no wash has this id
            ConflictError: If reopening would create a second pending wash for the plate
        """
        new_status = parse_status(status)

        wash = await self.session.get(Wash, wash_id)
        if wash is None:
            raise NotFoundError("Wash", wash_id)

        plate = wash.plate
        previous = wash.status
        wash.status = new_status.value

        try:
            await self.session.flush()
            await self.session.commit()
            await self.session.refresh(wash)
        except IntegrityError as e:
            await self.session.rollback()
            raise pending_conflict(plate) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to update wash status: {str(e)}", original_error=e) from e

        logger.info(f"Wash {wash_id} status {previous} -> {new_status.value}")
        return wash

"""
Client Registry Service

This service keeps one Client record per license plate:
- Upsert by plate (used by every service registration)
- Direct creation, listing, free-text search
- Update by the client's custom id

Design Decisions:
- Plate is the natural key; the custom id stays stable across updates
- "Not found" during the upsert is the create path, never an error
- Uniqueness violations surface as ConflictError after a rollback
"""

import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_queue.core.exceptions import ConflictError, DatabaseError, NotFoundError
from carwash_queue.db.models import Client, new_client_id

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "phone", "plate", "car_model")

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the query text is matched literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class ClientRegistryService:
    """
    Business logic for client records.

    All methods work on the session they were given; write methods commit
    unless told otherwise so the caller can group several writes into one
    transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_plate(self, plate: str) -> Optional[Client]:
        statement = select(Client).where(Client.plate == plate).limit(1)
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def get_by_id(self, client_id: str) -> Optional[Client]:
        statement = select(Client).where(Client.id == client_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def upsert_by_plate(
        self,
        name: Optional[str],
        phone: Optional[str],
        plate: str,
        car_model: Optional[str],
        commit: bool = True
    ) -> Client:
        """
        Create the client for a plate, or refresh its contact data.

        Args:
            name: Owner name
            phone: Owner phone
            plate: License plate (lookup key)
            car_model: Car model
            commit: Commit the transaction (False leaves it to the caller)

        Returns:
            The created or updated Client

        Raises:
            ConflictError: If a concurrent registration created the plate first
        """
        client = await self.get_by_plate(plate)

        if client:
            client.name = name
            client.phone = phone
            client.car_model = car_model
            logger.info(f"Updating client {client.id} for plate {plate}")
        else:
            client = Client(
                id=new_client_id(),
                name=name,
                phone=phone,
                plate=plate,
                car_model=car_model
            )
            self.session.add(client)
            logger.info(f"Creating client {client.id} for plate {plate}")

        return await self._save(client, plate, commit)

    async def create(self, data: dict) -> Client:
        """
        Insert a client as given, generating an id when none is supplied.

        Args:
            data: Client fields (id, name, phone, plate, car_model)

        Returns:
            The persisted Client

        Raises:
            ConflictError: If the id or the plate is already registered
        """
        fields = {key: value for key, value in data.items() if value is not None}
        if "id" in fields and await self.get_by_id(fields["id"]) is not None:
            raise ConflictError(f"A client with id '{fields['id']}' already exists")
        fields.setdefault("id", new_client_id())

        client = Client(**fields)
        self.session.add(client)
        return await self._save(client, client.plate, commit=True)

    async def list_clients(self) -> list[Client]:
        """Return every client, most recently created first."""
        statement = select(Client).order_by(Client.created_at.desc())
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def search(self, query: Optional[str]) -> list[Client]:
        """
        Case-insensitive substring search over name, plate, phone and car model.

        An empty or missing query matches every client.

        Returns:
            Matching clients, most recently created first (possibly empty)
        """
        pattern = f"%{escape_like(query or '')}%"
        statement = (
            select(Client)
            .where(or_(
                Client.name.ilike(pattern, escape=LIKE_ESCAPE),
                Client.plate.ilike(pattern, escape=LIKE_ESCAPE),
                Client.phone.ilike(pattern, escape=LIKE_ESCAPE),
                Client.car_model.ilike(pattern, escape=LIKE_ESCAPE),
            ))
            .order_by(Client.created_at.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update_by_id(self, client_id: str, fields: dict) -> Client:
        """
        Overwrite name, phone, plate and car model of a client.

        Fields that are missing or None are left untouched.

        Raises:
            NotFoundError: If no client has this custom id
            ConflictError: If the new plate belongs to another client
        """
        client = await self.get_by_id(client_id)
        if client is None:
            raise NotFoundError("Client", client_id)

        for key in UPDATABLE_FIELDS:
            value = fields.get(key)
            if value is not None:
                setattr(client, key, value)

        logger.info(f"Updating client {client_id}")
        return await self._save(client, client.plate, commit=True)

    async def _save(self, client: Client, plate: str, commit: bool) -> Client:
        client_id = client.id
        try:
            await self.session.flush()
            if commit:
                await self.session.commit()
                await self.session.refresh(client)
            return client
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Client {client_id} or plate {plate} is already registered")
            raise ConflictError(
                f"A client with id '{client_id}' or plate '{plate}' already exists"
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(f"Failed to save client: {str(e)}", original_error=e) from e

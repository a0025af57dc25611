"""
Tests for the client registry service against a real SQLite session.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from carwash_queue.core.exceptions import ConflictError, NotFoundError
from carwash_queue.db.models import Client
from carwash_queue.services.client_service import ClientRegistryService, escape_like


async def count_clients(session) -> int:
    result = await session.execute(select(func.count()).select_from(Client))
    return result.scalar_one()


class TestUpsertByPlate:
    async def test_creates_client_for_new_plate(self, session):
        registry = ClientRegistryService(session)

        client = await registry.upsert_by_plate("Ana", "1199990000", "ABC1234", "Gol")

        assert client.id
        assert client.plate == "ABC1234"
        assert await count_clients(session) == 1

    async def test_updates_existing_client_in_place(self, session):
        """Name, phone and car model are overwritten; id and plate stay."""
        registry = ClientRegistryService(session)
        first = await registry.upsert_by_plate("Ana", "1199990000", "ABC1234", "Gol")
        first_id = first.id

        second = await registry.upsert_by_plate("Ana Maria", "1188880000", "ABC1234", "Polo")

        assert second.id == first_id
        assert second.name == "Ana Maria"
        assert second.phone == "1188880000"
        assert second.car_model == "Polo"
        assert await count_clients(session) == 1


class TestCreate:
    async def test_generates_id_when_missing(self, session):
        client = await ClientRegistryService(session).create(
            {"id": None, "name": "Bruno", "phone": "11", "plate": "XYZ9876", "car_model": "Uno"}
        )
        assert len(client.id) == 36

    async def test_keeps_caller_id(self, session):
        client = await ClientRegistryService(session).create(
            {"id": "front-end-id", "name": "Bruno", "plate": "XYZ9876"}
        )
        assert client.id == "front-end-id"

    async def test_duplicate_plate_is_a_conflict(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"name": "Bruno", "plate": "XYZ9876"})

        with pytest.raises(ConflictError):
            await registry.create({"name": "Carla", "plate": "XYZ9876"})

        assert await count_clients(session) == 1

    async def test_duplicate_id_is_a_conflict_naming_the_id(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"id": "front-end-id", "name": "Bruno", "plate": "XYZ9876"})

        with pytest.raises(ConflictError) as excinfo:
            await registry.create({"id": "front-end-id", "name": "Carla", "plate": "ABC1234"})

        assert "id 'front-end-id'" in str(excinfo.value)
        assert "plate" not in str(excinfo.value)
        assert await count_clients(session) == 1


class TestListAndSearch:
    async def _seed(self, registry):
        base = datetime(2026, 1, 1, 9, 0)
        await registry.create({"name": "Ana", "phone": "1111", "plate": "AAA1111",
                               "car_model": "GOL", "created_at": base})
        await registry.create({"name": "Bruno", "phone": "2222", "plate": "BBB2222",
                               "car_model": "Civic", "created_at": base + timedelta(minutes=1)})
        await registry.create({"name": "Carla", "phone": "3333", "plate": "CCC3333",
                               "car_model": "Onix", "created_at": base + timedelta(minutes=2)})

    async def test_list_is_newest_first(self, session):
        registry = ClientRegistryService(session)
        await self._seed(registry)

        clients = await registry.list_clients()

        assert [c.name for c in clients] == ["Carla", "Bruno", "Ana"]

    async def test_search_is_case_insensitive_across_fields(self, session):
        registry = ClientRegistryService(session)
        await self._seed(registry)

        assert [c.name for c in await registry.search("gol")] == ["Ana"]
        assert [c.name for c in await registry.search("bbb")] == ["Bruno"]
        assert [c.name for c in await registry.search("333")] == ["Carla"]
        assert [c.name for c in await registry.search("A")] == ["Carla", "Ana"]

    async def test_search_folds_accented_letters(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"name": "JOÃO SILVA", "plate": "JOA0001"})
        await registry.create({"name": "Mário", "plate": "MAR0001", "car_model": "Fiat Uno"})

        assert [c.name for c in await registry.search("joão")] == ["JOÃO SILVA"]
        assert [c.name for c in await registry.search("MÁRIO")] == ["Mário"]
        assert [c.name for c in await registry.search("silva")] == ["JOÃO SILVA"]

    async def test_search_without_match_is_empty(self, session):
        registry = ClientRegistryService(session)
        await self._seed(registry)

        assert await registry.search("xyz") == []

    async def test_empty_query_matches_everything(self, session):
        registry = ClientRegistryService(session)
        await self._seed(registry)

        assert len(await registry.search("")) == 3
        assert len(await registry.search(None)) == 3

    async def test_wildcards_are_literal(self, session):
        registry = ClientRegistryService(session)
        await self._seed(registry)

        assert await registry.search("%") == []
        assert await registry.search("_") == []

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"


class TestUpdateById:
    async def test_updates_fields(self, session):
        registry = ClientRegistryService(session)
        client = await registry.create({"id": "c-1", "name": "Ana", "phone": "1", "plate": "AAA1111"})

        updated = await registry.update_by_id(
            "c-1",
            {"name": "Ana Paula", "phone": "2", "plate": "AAA2222", "car_model": "Fox"}
        )

        assert updated.id == client.id
        assert updated.name == "Ana Paula"
        assert updated.plate == "AAA2222"
        assert updated.car_model == "Fox"

    async def test_missing_fields_are_kept(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"id": "c-1", "name": "Ana", "phone": "1", "plate": "AAA1111"})

        updated = await registry.update_by_id("c-1", {"phone": "9"})

        assert updated.name == "Ana"
        assert updated.phone == "9"

    async def test_unknown_id_is_not_found_and_mutates_nothing(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"id": "c-1", "name": "Ana", "plate": "AAA1111"})

        with pytest.raises(NotFoundError):
            await registry.update_by_id("missing", {"name": "Ghost", "plate": "GGG0000"})

        clients = await registry.list_clients()
        assert [(c.name, c.plate) for c in clients] == [("Ana", "AAA1111")]

    async def test_plate_taken_by_other_client_is_a_conflict(self, session):
        registry = ClientRegistryService(session)
        await registry.create({"id": "c-1", "name": "Ana", "plate": "AAA1111"})
        await registry.create({"id": "c-2", "name": "Bruno", "plate": "BBB2222"})

        with pytest.raises(ConflictError):
            await registry.update_by_id("c-2", {"plate": "AAA1111"})

"""Optimistic locking on Address."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from canvass_api.models.address import Address
from canvass_api.services.address_service import new_address


class TestAddressVersion:
    @pytest.mark.asyncio
    async def test_version_starts_and_increments(self, async_session: AsyncSession) -> None:
        address = new_address("5 Avenue A")
        async_session.add(address)
        await async_session.commit()
        assert address.version_id == 1

        address.city = "New York"
        await async_session.commit()
        assert address.version_id == 2

    @pytest.mark.asyncio
    async def test_concurrent_write_is_stale(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        async with session_factory() as setup:
            address = new_address("5 Avenue A")
            setup.add(address)
            await setup.commit()
            address_id = address.id

        async with session_factory() as first, session_factory() as second:
            mine = await first.get(Address, address_id)
            theirs = await second.get(Address, address_id)

            theirs.best_canvass_response = "not_home"
            await second.commit()

            mine.best_canvass_response = "asked_to_leave"
            with pytest.raises(StaleDataError):
                await first.commit()

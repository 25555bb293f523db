# Services/customer_service.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from Models import Customer
from Services.errors import InternalError, NotFoundError

logger = logging.getLogger(__name__)

# Insert constructs that support ON CONFLICT ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_WRITE_OPTIONS = {"synchronize_session": False, "populate_existing": True}


class CustomerService:
    """
    Data access for customer records.

    Every public coroutine issues its statement(s) through a fresh session and
    raises ``NotFoundError`` or ``InternalError``. Store exceptions are logged
    here and never passed on to callers.
    """

    def __init__(self, sessions: async_sessionmaker):
        self._sessions = sessions

    @asynccontextmanager
    async def _session(self, operation: str, write: bool = False) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                if write:
                    async with session.begin():
                        yield session
                else:
                    yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"Customer {operation} failed: {exc}", exc_info=True)
            raise InternalError(exc) from exc

    async def by_id(self, customer_id: int) -> Customer:
        async with self._session("lookup") as session:
            customer = await session.scalar(select(Customer).where(Customer.id == customer_id))
        if customer is None:
            raise NotFoundError()
        return customer

    async def all(self) -> List[Customer]:
        async with self._session("listing") as session:
            result = await session.scalars(select(Customer).order_by(Customer.id))
            return list(result.all())

    async def all_active(self) -> List[Customer]:
        async with self._session("active listing") as session:
            result = await session.scalars(
                select(Customer).where(Customer.active.is_(True)).order_by(Customer.id)
            )
            return list(result.all())

    async def save(self, customer_id: int, name: str, phone: str) -> Customer:
        """
        Create a customer when ``customer_id`` is 0, otherwise update name and phone.

        Creating with a phone that is already taken returns the existing row
        unchanged instead of inserting a duplicate.
        """
        if customer_id == 0:
            return await self._insert_or_existing(name, phone)

        await self.by_id(customer_id)

        async with self._session("update", write=True) as session:
            result = await session.execute(
                update(Customer)
                .where(Customer.id == customer_id)
                .values(name=name, phone=phone)
                .returning(Customer),
                execution_options=_WRITE_OPTIONS,
            )
            customer = result.scalar_one_or_none()
        if customer is None:
            # removed between the existence check and the update
            raise NotFoundError()
        return customer

    async def _insert_or_existing(self, name: str, phone: str) -> Customer:
        async with self._session("insert", write=True) as session:
            dialect = session.get_bind().dialect.name
            insert = _UPSERT_INSERTS.get(dialect)
            if insert is None:
                logger.error(f"Customer insert is not supported on the {dialect} dialect")
                raise InternalError()

            stmt = insert(Customer).values(name=name, phone=phone)
            # A no-op update on conflict so RETURNING yields the existing row
            stmt = stmt.on_conflict_do_update(
                index_elements=[Customer.phone],
                set_={"phone": stmt.excluded.phone},
            )
            result = await session.execute(
                stmt.returning(Customer),
                execution_options={"populate_existing": True},
            )
            return result.scalar_one()

    async def remove_by_id(self, customer_id: int) -> Customer:
        async with self._session("removal", write=True) as session:
            result = await session.execute(
                delete(Customer).where(Customer.id == customer_id).returning(Customer),
                execution_options=_WRITE_OPTIONS,
            )
            customer = result.scalar_one_or_none()
        if customer is None:
            raise NotFoundError()
        return customer

    async def change_active(self, customer_id: int, active: bool) -> Customer:
        async with self._session("status change", write=True) as session:
            result = await session.execute(
                update(Customer)
                .where(Customer.id == customer_id)
                .values(active=active)
                .returning(Customer),
                execution_options=_WRITE_OPTIONS,
            )
            customer = result.scalar_one_or_none()
        if customer is None:
            raise NotFoundError()
        return customer

    async def block_by_id(self, customer_id: int) -> Customer:
        return await self.change_active(customer_id, False)

    async def unblock_by_id(self, customer_id: int) -> Customer:
        return await self.change_active(customer_id, True)

# Tests/test_customer_service.py
import pytest

from database import create_sessionmaker
from Services.customer_service import CustomerService
from Services.errors import ErrorKind, InternalError, NotFoundError

pytestmark = pytest.mark.anyio


async def test_save_without_id_creates_customer(service):
    customer = await service.save(0, "Alice", "+1000")

    assert customer.id > 0
    assert customer.name == "Alice"
    assert customer.phone == "+1000"
    assert customer.active is True
    assert customer.created is not None
    assert len(await service.all()) == 1


async def test_by_id_returns_stored_fields(service):
    saved = await service.save(0, "Alice", "+1000")

    found = await service.by_id(saved.id)

    assert (found.id, found.name, found.phone, found.active, found.created) == (
        saved.id, saved.name, saved.phone, saved.active, saved.created
    )


async def test_by_id_missing_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.by_id(999)


async def test_save_with_taken_phone_returns_existing_customer(service):
    first = await service.save(0, "Alice", "+1000")

    second = await service.save(0, "Mallory", "+1000")

    assert second.id == first.id
    assert second.name == "Alice"
    assert second.created == first.created
    assert [c.id for c in await service.all()] == [first.id]


async def test_save_with_id_updates_only_name_and_phone(service):
    original = await service.save(0, "Alice", "+1000")
    await service.block_by_id(original.id)

    updated = await service.save(original.id, "Alice Smith", "+1001")

    assert updated.id == original.id
    assert updated.name == "Alice Smith"
    assert updated.phone == "+1001"
    assert updated.active is False
    assert updated.created == original.created


async def test_save_with_unknown_id_raises_not_found_without_writing(service):
    with pytest.raises(NotFoundError):
        await service.save(42, "Ghost", "+4200")

    assert await service.all() == []


async def test_save_with_phone_of_another_customer_is_internal(service):
    alice = await service.save(0, "Alice", "+1000")
    bob = await service.save(0, "Bob", "+2000")

    with pytest.raises(InternalError) as excinfo:
        await service.save(bob.id, "Bob", alice.phone)

    assert excinfo.value.kind is ErrorKind.INTERNAL
    assert excinfo.value.cause is not None
    assert (await service.by_id(bob.id)).phone == "+2000"


async def test_all_on_empty_store_is_empty_list(service):
    assert await service.all() == []
    assert await service.all_active() == []


async def test_all_active_skips_blocked_customers(service):
    alice = await service.save(0, "Alice", "+1000")
    bob = await service.save(0, "Bob", "+2000")
    await service.block_by_id(bob.id)

    assert [c.id for c in await service.all()] == [alice.id, bob.id]
    assert [c.id for c in await service.all_active()] == [alice.id]


async def test_block_and_unblock_are_idempotent(service):
    customer = await service.save(0, "Alice", "+1000")

    assert (await service.block_by_id(customer.id)).active is False
    assert (await service.block_by_id(customer.id)).active is False
    assert (await service.unblock_by_id(customer.id)).active is True
    assert (await service.unblock_by_id(customer.id)).active is True


async def test_block_unknown_customer_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.block_by_id(7)
    with pytest.raises(NotFoundError):
        await service.unblock_by_id(7)


async def test_remove_returns_former_values_and_is_irreversible(service):
    customer = await service.save(0, "Alice", "+1000")

    removed = await service.remove_by_id(customer.id)

    assert removed.id == customer.id
    assert removed.phone == "+1000"
    with pytest.raises(NotFoundError):
        await service.by_id(customer.id)
    with pytest.raises(NotFoundError):
        await service.remove_by_id(customer.id)


async def test_store_failure_is_reported_as_internal(engine):
    # No tables were created, every statement fails in the store
    service = CustomerService(create_sessionmaker(engine))

    with pytest.raises(InternalError) as excinfo:
        await service.all()

    assert str(excinfo.value) == "internal"
    assert excinfo.value.cause is not None
    with pytest.raises(InternalError):
        await service.save(0, "Alice", "+1000")

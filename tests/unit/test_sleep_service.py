"""Unit tests for SleepRecordService"""

import pytest
import psycopg
from uuid import UUID, uuid4

from sleep_api.exceptions import InternalError, RecordNotFoundError, ValidationError
from sleep_api.services.sleep_service import (
    SleepRecordService,
    parse_record_id,
    parse_user_id,
)


@pytest.fixture
def failing_service(mock_store):
    """Service whose store raises a connection error on every call"""
    error = psycopg.OperationalError("server closed the connection")
    mock_store.create.side_effect = error
    mock_store.find_by_user.side_effect = error
    mock_store.delete_by_id.side_effect = error
    return SleepRecordService(mock_store)


# ============================================================================
# Path parsing
# ============================================================================

@pytest.mark.parametrize("raw,expected", [
    ("1", 1),
    ("42", 42),
    (" 7 ", 7),
    ("1.0", 1),
    ("-3", -3),
    ("1e3", 1000),
    ("1.5", None),
    ("abc", None),
    ("inf", None),
    ("nan", None),
    ("1_0", None),
    ("١٠", None),
    ("１", None),
])
def test_parse_user_id(raw, expected):
    """Path user ids are cast the way the numeric column would compare"""
    assert parse_user_id(raw) == expected


def test_parse_record_id():
    """Only valid UUIDs name a record"""
    record_id = uuid4()
    assert parse_record_id(str(record_id)) == record_id
    assert parse_record_id("507f1f77bcf86cd799439011") is None
    assert parse_record_id("not-an-id") is None


# ============================================================================
# Create
# ============================================================================

@pytest.mark.asyncio
async def test_create_record_success(sleep_service, memory_store):
    """Valid payload creates exactly one record"""
    record = await sleep_service.create_record({"userId": 1, "hours": 8})

    assert record.user_id == 1
    assert record.hours == 8.0
    assert isinstance(record.id, UUID)
    assert record.created_at == record.updated_at
    assert len(memory_store) == 1


@pytest.mark.asyncio
async def test_create_record_casts_numeric_strings(sleep_service):
    """Numeric strings are cast before storing"""
    record = await sleep_service.create_record({"userId": "12", "hours": "6.5"})

    assert record.user_id == 12
    assert record.hours == 6.5


@pytest.mark.asyncio
async def test_create_record_ignores_extra_fields(sleep_service):
    """Only userId and hours are persisted"""
    record = await sleep_service.create_record({"userId": 1, "hours": 8, "note": "nap"})

    assert record.model_dump().keys() == {"id", "user_id", "hours", "created_at", "updated_at"}


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    None,
    {},
    "userId=1&hours=8",
    {"userId": 1},
    {"hours": 8},
    {"userId": 0, "hours": 8},
    {"userId": 1, "hours": 0},
    {"userId": 1, "hours": 0.0},
    {"userId": False, "hours": 8},
])
async def test_create_record_missing_fields(mock_store, payload):
    """Absent or falsy fields fail before the store is touched"""
    service = SleepRecordService(mock_store)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_record(payload)

    assert exc_info.value.user_message == "All fields are required"
    assert exc_info.value.status_code == 400
    mock_store.create.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("payload,field", [
    ({"userId": "abc", "hours": 8}, "userId"),
    ({"userId": 1.5, "hours": 8}, "userId"),
    ({"userId": 1, "hours": "eight"}, "hours"),
    ({"userId": "1_0", "hours": 8}, "userId"),
    ({"userId": "١٠", "hours": 8}, "userId"),
    ({"userId": 1, "hours": "٨"}, "hours"),
    ({"userId": 1, "hours": "7_5"}, "hours"),
])
async def test_create_record_uncastable_fields(mock_store, payload, field):
    """Values the schema cannot cast are rejected with the field name"""
    service = SleepRecordService(mock_store)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_record(payload)

    assert exc_info.value.field == field
    assert exc_info.value.user_message == f"{field} must be a number"
    mock_store.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_record_storage_failure(failing_service):
    """Store faults become InternalError with a generic message"""
    with pytest.raises(InternalError) as exc_info:
        await failing_service.create_record({"userId": 1, "hours": 8})

    assert exc_info.value.user_message == "An error occurred while creating the sleep record"
    assert isinstance(exc_info.value.cause, psycopg.OperationalError)


# ============================================================================
# List
# ============================================================================

@pytest.mark.asyncio
async def test_list_records_oldest_first(sleep_service):
    """Records come back in creation order"""
    for hours in (5, 6, 7):
        await sleep_service.create_record({"userId": 3, "hours": hours})

    records = await sleep_service.list_records("3")

    assert [r.hours for r in records] == [5, 6, 7]
    assert records[0].created_at <= records[1].created_at <= records[2].created_at


@pytest.mark.asyncio
async def test_list_records_passes_parsed_user_id(mock_store, sleep_record_factory):
    """The store receives the numeric user id, not the path string"""
    mock_store.find_by_user.return_value = [sleep_record_factory(user_id=4)]
    service = SleepRecordService(mock_store)

    await service.list_records("4.0")

    mock_store.find_by_user.assert_awaited_once_with(4)


@pytest.mark.asyncio
async def test_list_records_none_found(sleep_service):
    """No records for a user raises RecordNotFoundError"""
    with pytest.raises(RecordNotFoundError) as exc_info:
        await sleep_service.list_records("999")

    assert exc_info.value.user_message == "No sleep records found for this user"
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_list_records_unparseable_user_id(mock_store):
    """A non-numeric user id is not-found without a store call"""
    service = SleepRecordService(mock_store)

    with pytest.raises(RecordNotFoundError):
        await service.list_records("abc")

    mock_store.find_by_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_records_storage_failure(failing_service):
    """Store faults on list are InternalError, not RecordNotFoundError"""
    with pytest.raises(InternalError) as exc_info:
        await failing_service.list_records("1")

    assert exc_info.value.user_message == "An error occurred while fetching sleep records"


# ============================================================================
# Delete
# ============================================================================

@pytest.mark.asyncio
async def test_delete_record_twice(sleep_service):
    """First delete succeeds, second is not-found"""
    record = await sleep_service.create_record({"userId": 1, "hours": 8})

    deleted = await sleep_service.delete_record(str(record.id))
    assert deleted.id == record.id

    with pytest.raises(RecordNotFoundError) as exc_info:
        await sleep_service.delete_record(str(record.id))
    assert exc_info.value.user_message == "Sleep record not found"


@pytest.mark.asyncio
async def test_delete_record_malformed_id(mock_store):
    """Malformed ids are not-found without a store call"""
    service = SleepRecordService(mock_store)

    with pytest.raises(RecordNotFoundError):
        await service.delete_record("507f1f77bcf86cd799439011")

    mock_store.delete_by_id.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_record_storage_failure(failing_service):
    """Store faults on delete become InternalError"""
    with pytest.raises(InternalError) as exc_info:
        await failing_service.delete_record(str(uuid4()))

    assert exc_info.value.user_message == "An error occurred while deleting the sleep record"
    assert exc_info.value.status_code == 500

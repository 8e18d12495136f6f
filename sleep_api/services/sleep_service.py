"""
SleepRecordService - Sleep Record Business Logic

Validates client input, maps each operation to a single store call and
converts storage faults into the service's exception hierarchy. The HTTP
layer only translates the results and exceptions into responses.
"""

import logging
import math
from collections.abc import Mapping
from typing import Any, List, Optional
from uuid import UUID

import pydantic

from sleep_api.db.store import SleepStore
from sleep_api.exceptions import (
    RecordNotFoundError,
    ValidationError,
    wrap_storage_exception,
)
from sleep_api.models.sleep import SleepRecord, SleepRecordCreate, is_decimal_number

logger = logging.getLogger(__name__)

FIELDS_REQUIRED = "All fields are required"
NO_RECORDS_FOR_USER = "No sleep records found for this user"
RECORD_NOT_FOUND = "Sleep record not found"
CREATE_FAILED = "An error occurred while creating the sleep record"
FETCH_FAILED = "An error occurred while fetching sleep records"
DELETE_FAILED = "An error occurred while deleting the sleep record"


def parse_user_id(raw: str) -> Optional[int]:
    """
    Cast a path segment to the numeric userId it can match.

    "7" and "7.0" give 7. Anything that is not an integral finite number
    gives None, since no stored userId could equal it. Only ASCII
    decimal notation is accepted ("1_0" and non-ASCII digits give None).
    """
    text = str(raw).strip()
    if not is_decimal_number(text):
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value) or not value.is_integer():
        return None
    return int(value)


def parse_record_id(raw: str) -> Optional[UUID]:
    """Parse a record id path segment, None if it is not a UUID"""
    try:
        return UUID(str(raw))
    except ValueError:
        return None


class SleepRecordService:
    """
    Service for creating, listing and deleting sleep records.

    The store is injected at construction so tests can pass an
    in-memory or mocked store.
    """

    def __init__(self, store: SleepStore):
        self.store = store

    async def create_record(self, payload: Any) -> SleepRecord:
        """
        Validate a create payload and persist one record.

        Args:
            payload: Parsed request body, expected to carry userId and hours

        Returns:
            The stored record (ids and timestamps assigned by the store)

        Raises:
            ValidationError: payload absent, a field missing or falsy
                (0 counts as missing), or a field that is not a number
            InternalError: the store failed
        """
        if not payload or not isinstance(payload, Mapping):
            raise ValidationError(FIELDS_REQUIRED, operation="create_record")
        for field in ("userId", "hours"):
            if not payload.get(field):
                raise ValidationError(
                    FIELDS_REQUIRED,
                    field=field,
                    value=payload.get(field),
                    operation="create_record"
                )

        try:
            fields = SleepRecordCreate.model_validate(
                {"userId": payload["userId"], "hours": payload["hours"]}
            )
        except pydantic.ValidationError as e:
            field = str(e.errors()[0]["loc"][0])
            raise ValidationError(
                f"{field} must be a number",
                field=field,
                value=payload.get(field),
                operation="create_record"
            ) from e

        try:
            record = await self.store.create(fields.user_id, fields.hours)
        except Exception as e:
            raise wrap_storage_exception(
                e,
                operation="create_record",
                user_message=CREATE_FAILED,
                user_id=str(fields.user_id)
            ) from e

        logger.info(f"Created sleep record {record.id} for user {record.user_id}: {record.hours}h")
        return record

    async def list_records(self, user_id: str) -> List[SleepRecord]:
        """
        Get all records for a user, oldest first.

        Raises:
            RecordNotFoundError: the user has no records
            InternalError: the store failed
        """
        parsed_user_id = parse_user_id(user_id)
        if parsed_user_id is None:
            raise RecordNotFoundError(
                NO_RECORDS_FOR_USER,
                record_type="SleepRecord",
                user_id=str(user_id),
                operation="list_records"
            )

        try:
            records = await self.store.find_by_user(parsed_user_id)
        except Exception as e:
            raise wrap_storage_exception(
                e,
                operation="list_records",
                user_message=FETCH_FAILED,
                user_id=str(user_id)
            ) from e

        if not records:
            raise RecordNotFoundError(
                NO_RECORDS_FOR_USER,
                record_type="SleepRecord",
                user_id=str(user_id),
                operation="list_records"
            )

        return records

    async def delete_record(self, record_id: str) -> SleepRecord:
        """
        Delete one record by id.

        Raises:
            RecordNotFoundError: no record has that id (including ids that
                are not valid UUIDs)
            InternalError: the store failed
        """
        parsed_id = parse_record_id(record_id)
        if parsed_id is None:
            raise RecordNotFoundError(
                RECORD_NOT_FOUND,
                record_type="SleepRecord",
                record_id=str(record_id),
                operation="delete_record"
            )

        try:
            deleted = await self.store.delete_by_id(parsed_id)
        except Exception as e:
            raise wrap_storage_exception(
                e,
                operation="delete_record",
                user_message=DELETE_FAILED,
                context={"record_id": str(record_id)}
            ) from e

        if deleted is None:
            raise RecordNotFoundError(
                RECORD_NOT_FOUND,
                record_type="SleepRecord",
                record_id=str(record_id),
                operation="delete_record"
            )

        logger.info(f"Deleted sleep record {deleted.id} (user {deleted.user_id})")
        return deleted

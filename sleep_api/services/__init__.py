"""
Service Layer Package

Business logic between the HTTP routes and the storage layer.

- SleepRecordService: create, list-by-user and delete-by-id for sleep records
"""

from sleep_api.services.sleep_service import SleepRecordService

__all__ = [
    "SleepRecordService",
]

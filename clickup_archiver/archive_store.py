"""DynamoDB-backed archive of tasks removed from ClickUp.

The store handle is created on first use and reused for the lifetime of the
process; it is never closed explicitly.
"""

import json
import logging
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from clickup_archiver.config import get_settings
from clickup_archiver.exceptions import ConfigurationError, PersistenceError
from clickup_archiver.models.archive import ArchiveRecord

logger = logging.getLogger(__name__)

_STORE_ERRORS = (BotoCoreError, ClientError)


def _to_item(record: ArchiveRecord) -> dict:
    # DynamoDB rejects floats; round-trip through JSON to get Decimals and ISO timestamps.
    return json.loads(record.model_dump_json(by_alias=True), parse_float=Decimal)


class ArchiveStore:
    """Upsert and count archived tasks in a table keyed by ``taskId``."""

    def __init__(self, table_name: str, region_name: str, endpoint_url: str | None = None, table=None):
        self.table_name = table_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self._table = table

    @property
    def table(self):
        if self._table is None:
            resource = boto3.resource("dynamodb", region_name=self.region_name, endpoint_url=self.endpoint_url)
            table = resource.Table(self.table_name)
            table.load()
            logger.info("Connected to archive table %s", self.table_name)
            self._table = table
        return self._table

    def connect(self) -> None:
        """Open the table handle now so connection problems surface before any work starts."""
        try:
            self.table
        except _STORE_ERRORS as e:
            raise PersistenceError(f"Archive store unavailable: {e}") from e

    def upsert(self, record: ArchiveRecord) -> None:
        """Write the record, replacing any earlier copy with the same task id."""
        try:
            self.table.put_item(Item=_to_item(record))
        except _STORE_ERRORS as e:
            raise PersistenceError(str(e)) from e

    def count_by_list(self, list_id: str) -> int:
        scan_args = {"FilterExpression": Attr("listId").eq(list_id), "Select": "COUNT"}
        total = 0
        try:
            while True:
                resp = self.table.scan(**scan_args)
                total += resp.get("Count", 0)
                last_key = resp.get("LastEvaluatedKey")
                if not last_key:
                    return total
                scan_args["ExclusiveStartKey"] = last_key
        except _STORE_ERRORS as e:
            raise PersistenceError(str(e)) from e


_store: ArchiveStore | None = None


def get_archive_store() -> ArchiveStore:
    """Return the process-wide archive store, creating it on first call."""
    global _store
    if _store is None:
        settings = get_settings()
        if not settings.archive_table_name:
            raise ConfigurationError("ARCHIVE_TABLE_NAME environment variable is not configured")
        _store = ArchiveStore(
            settings.archive_table_name,
            settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
        )
    return _store

"""
Survey Analytics - Record Store Repository.
Insert/query access to the hosted survey tables, one partition per survey type.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError
import structlog

from ..config import RecordStoreConfig
from ..exceptions import StoreError, StoreTimeoutError
from ..schemas import SurveyRecord, record_type_for_table

logger = structlog.get_logger(__name__)


def _resolve_record_type(table_key: str) -> type:
    record_type = record_type_for_table(table_key)
    if record_type is None:
        raise StoreError(f"Unknown table: {table_key}", table_key=table_key)
    return record_type


def _as_utc(since: datetime | None) -> datetime | None:
    """Naive timestamps are taken to be UTC."""
    if since is None or since.tzinfo is not None:
        return since
    return since.replace(tzinfo=timezone.utc)


class RecordStore(ABC):
    """Abstract record store. Records are append-only; no update or delete."""

    @abstractmethod
    async def connect(self) -> None: ...
    @abstractmethod
    async def disconnect(self) -> None: ...
    @abstractmethod
    async def health_check(self) -> bool: ...
    @abstractmethod
    async def insert(self, table_key: str, record: SurveyRecord) -> None: ...
    @abstractmethod
    async def query(self, table_key: str, since: datetime | None = None) -> list[SurveyRecord]: ...


class InMemoryRecordStore(RecordStore):
    """In-memory implementation for testing and development."""

    def __init__(self) -> None:
        self._tables: dict[str, list[SurveyRecord]] = {}
        self._connected = False
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        self._connected = True
        logger.info("inmemory_store_connected")

    async def disconnect(self) -> None:
        self._connected = False
        logger.info("inmemory_store_disconnected")

    async def health_check(self) -> bool:
        return self._connected

    async def insert(self, table_key: str, record: SurveyRecord) -> None:
        record_type = _resolve_record_type(table_key)
        if not isinstance(record, record_type):
            raise StoreError(
                f"Table {table_key} does not accept {type(record).__name__}", table_key=table_key,
            )
        if record.submitted_at is None:
            record = record.model_copy(update={"submitted_at": datetime.now(timezone.utc)})
        async with self._lock:
            self._tables.setdefault(table_key, []).append(record)
        logger.debug("record_inserted", table=table_key)

    async def query(self, table_key: str, since: datetime | None = None) -> list[SurveyRecord]:
        _resolve_record_type(table_key)
        since = _as_utc(since)
        rows = list(self._tables.get(table_key, []))
        if since is None:
            return rows
        return [r for r in rows if r.submitted_at is not None and r.submitted_at >= since]


class PostgrestRecordStore(RecordStore):
    """Record store backed by a hosted PostgREST endpoint (e.g. Supabase)."""

    def __init__(self, config: RecordStoreConfig, client: httpx.AsyncClient | None = None) -> None:
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._lock = asyncio.Lock()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    def _path(self, table_key: str) -> str:
        return f"{self._config.schema_path}/{table_key}"

    async def connect(self) -> None:
        async with self._lock:
            if self._client is not None:
                return
            self._client = httpx.AsyncClient(
                base_url=self._config.url,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers=self._headers(),
                verify=self._config.verify_ssl,
            )
            self._owns_client = True
            logger.info("postgrest_store_connected", url=self._config.url)

    async def disconnect(self) -> None:
        async with self._lock:
            if self._client is not None and self._owns_client:
                await self._client.aclose()
            self._client = None
            logger.info("postgrest_store_disconnected")

    async def health_check(self) -> bool:
        if self._client is None:
            return False
        try:
            response = await self._client.get(f"{self._config.schema_path}/", headers=self._headers())
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.warning("postgrest_health_check_failed", error=str(e))
            return False

    def _require_client(self, table_key: str) -> httpx.AsyncClient:
        if self._client is None:
            raise StoreError("Not connected to record store", table_key=table_key)
        return self._client

    async def insert(self, table_key: str, record: SurveyRecord) -> None:
        _resolve_record_type(table_key)
        client = self._require_client(table_key)
        payload = record.model_dump(mode="json", exclude_none=True)
        try:
            response = await client.post(
                self._path(table_key), json=[payload],
                headers={**self._headers(), "Prefer": "return=minimal"},
            )
        except httpx.TimeoutException as e:
            raise StoreTimeoutError(f"Insert into {table_key} timed out", table_key=table_key, cause=e)
        except httpx.HTTPError as e:
            logger.error("record_insert_failed", table=table_key, error=str(e))
            raise StoreError(f"Failed to insert into {table_key}: {e}", table_key=table_key, cause=e)
        if response.status_code >= 300:
            raise StoreError(
                f"Insert into {table_key} rejected with status {response.status_code}",
                table_key=table_key, details={"status_code": response.status_code, "body": response.text[:200]},
            )
        logger.debug("record_inserted", table=table_key)

    async def query(self, table_key: str, since: datetime | None = None) -> list[SurveyRecord]:
        record_type = _resolve_record_type(table_key)
        client = self._require_client(table_key)
        params: dict[str, Any] = {"select": "*", "order": "submitted_at.asc"}
        since = _as_utc(since)
        if since is not None:
            params["submitted_at"] = f"gte.{since.isoformat()}"
        try:
            response = await client.get(self._path(table_key), params=params, headers=self._headers())
        except httpx.TimeoutException as e:
            raise StoreTimeoutError(f"Query on {table_key} timed out", table_key=table_key, cause=e)
        except httpx.HTTPError as e:
            logger.error("record_query_failed", table=table_key, error=str(e))
            raise StoreError(f"Failed to query {table_key}: {e}", table_key=table_key, cause=e)
        if response.status_code >= 300:
            raise StoreError(
                f"Query on {table_key} failed with status {response.status_code}",
                table_key=table_key, details={"status_code": response.status_code, "body": response.text[:200]},
            )
        try:
            rows = response.json()
        except ValueError as e:
            raise StoreError(f"Malformed response from {table_key}", table_key=table_key, cause=e)
        records: list[SurveyRecord] = []
        for row in rows:
            try:
                records.append(record_type.model_validate(row))
            except PydanticValidationError as e:
                logger.warning("malformed_row_skipped", table=table_key, errors=e.error_count())
        return records


_store_instance: RecordStore | None = None
_store_config: RecordStoreConfig | None = None


def configure_record_store(config: RecordStoreConfig | None = None) -> None:
    """Configure the singleton store; a config with a URL selects PostgREST."""
    global _store_instance, _store_config
    _store_config = config
    _store_instance = None


def create_record_store(config: RecordStoreConfig | None = None) -> RecordStore:
    """Factory function to create appropriate store (non-singleton)."""
    if config is not None and config.enabled:
        return PostgrestRecordStore(config)
    return InMemoryRecordStore()


def get_record_store() -> RecordStore:
    """Get singleton store instance."""
    global _store_instance
    if _store_instance is None:
        _store_instance = create_record_store(_store_config)
        logger.info("record_store_created", type=type(_store_instance).__name__)
    return _store_instance


def reset_record_store() -> None:
    """Reset the singleton store (for testing)."""
    global _store_instance, _store_config
    _store_instance = None
    _store_config = None

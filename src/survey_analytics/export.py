"""
Survey Analytics - Data Export.

Serializes homogeneous record sets to CSV or pretty-printed JSON for admin
download. Only authenticated administrators may export.

Architecture Layer: Application
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel
import structlog

from .config import ExportConfig
from .exceptions import EmptyExportError, ValidationError
from .infrastructure.repository import RecordStore
from .schemas import MENTAL_HEALTH_TABLE, PhobiaType
from .security import AdminCapability, require_capability

logger = structlog.get_logger(__name__)

MENTAL_HEALTH_DATA_TYPE = "mental_health"


class ExportFormat(str, Enum):
    """Supported export formats."""
    CSV = "csv"
    JSON = "json"

    @property
    def media_type(self) -> str:
        return "text/csv" if self == ExportFormat.CSV else "application/json"

    @property
    def extension(self) -> str:
        return self.value


def _as_row(record: Any) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump()
    if isinstance(record, Mapping):
        return dict(record)
    raise TypeError(f"Cannot export {type(record).__name__}")


_CSV_SPECIAL = (",", '"', "\r", "\n")


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _csv_cell(value: Any) -> str:
    text = _csv_value(value)
    if any(c in text for c in _CSV_SPECIAL):
        return _quote(text)
    return text


def to_csv(records: Sequence[Any]) -> str:
    """
    Convert records to CSV text.

    The header is taken from the first record's fields in order, every header
    quoted. Values containing a comma, quote, CR or LF are quoted with inner
    quotes doubled. Rows are joined with LF. Empty input yields an empty string.
    """
    if not records:
        return ""
    rows = [_as_row(r) for r in records]
    headers = list(rows[0].keys())

    lines = [",".join(_quote(h) for h in headers)]
    lines.extend(",".join(_csv_cell(row.get(h)) for h in headers) for row in rows)
    return "\n".join(lines)


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(records: Sequence[Any]) -> str:
    rows = [_as_row(r) for r in records]
    return json.dumps(rows, indent=2, default=_json_default)


def generate_filename(data_type: str, fmt: ExportFormat | str, today: date | None = None) -> str:
    """`<data_type>_<YYYY-MM-DD>.<ext>`, dated in UTC."""
    fmt = ExportFormat(fmt)
    today = today or datetime.now(timezone.utc).date()
    return f"{data_type}_{today.isoformat()}.{fmt.extension}"


def add_metadata(rows: Sequence[Any], data_type: str, exported_by: str = "Admin Panel",
                 now: datetime | None = None) -> list[Any]:
    """Prepend an export metadata row."""
    now = now or datetime.now(timezone.utc)
    metadata = {
        "type": "metadata",
        "exported_at": now.isoformat(),
        "data_type": data_type,
        "record_count": len(rows),
        "exported_by": exported_by,
    }
    return [metadata, *rows]


def table_for_data_type(data_type: str) -> str:
    """Map an export data type (`mental_health` or a phobia id) to its table."""
    if data_type == MENTAL_HEALTH_DATA_TYPE:
        return MENTAL_HEALTH_TABLE
    try:
        return PhobiaType(data_type).table_key
    except ValueError:
        raise ValidationError(
            f"Unknown export data type: {data_type}; expected one of {', '.join(available_data_types())}",
            field="data_type", value=data_type,
        )


def available_data_types() -> list[str]:
    return [MENTAL_HEALTH_DATA_TYPE, *(p.value for p in PhobiaType)]


@dataclass(frozen=True)
class ExportPayload:
    """Serialized export ready for download."""
    content: str
    filename: str
    media_type: str
    record_count: int


class ExportService:
    """Admin-only raw table export."""

    def __init__(self, store: RecordStore, config: ExportConfig | None = None) -> None:
        self._store = store
        self._config = config or ExportConfig()

    async def export(
        self,
        capability: AdminCapability | None,
        data_type: str,
        fmt: ExportFormat | str = ExportFormat.CSV,
        since: datetime | None = None,
    ) -> ExportPayload:
        capability = require_capability(capability)
        try:
            fmt = ExportFormat(fmt)
        except ValueError:
            raise ValidationError(f"Unsupported export format: {fmt}", field="format", value=fmt)
        if fmt.value not in self._config.formats:
            raise ValidationError(f"Export format disabled: {fmt.value}", field="format", value=fmt.value)

        table_key = table_for_data_type(data_type)
        records = await self._store.query(table_key, since=since)
        if not records:
            raise EmptyExportError(data_type)

        if fmt == ExportFormat.CSV:
            content = to_csv(records)
        else:
            rows: list[Any] = [r.model_dump(mode="json") for r in records]
            if self._config.include_metadata:
                rows = add_metadata(rows, data_type, exported_by=self._config.exported_by)
            content = to_json(rows)

        logger.info("data_exported", data_type=data_type, format=fmt.value,
                    records=len(records), subject=capability.subject)
        return ExportPayload(
            content=content,
            filename=generate_filename(data_type, fmt),
            media_type=fmt.media_type,
            record_count=len(records),
        )

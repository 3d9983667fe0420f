"""Survey Analytics - Infrastructure Layer."""
from .repository import (
    InMemoryRecordStore,
    PostgrestRecordStore,
    RecordStore,
    configure_record_store,
    create_record_store,
    get_record_store,
    reset_record_store,
)

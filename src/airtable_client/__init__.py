"""Airtable client.

Typed, synchronous client for the Airtable REST API with automatic
pagination and batched writes.

Exports:
    AirtableClient: Entry point holding the API key and base URL.
    AirtableBase: Factory for table handles.
    AirtableTable: Record operations for one table.
    AirtableError: Error raised for failed or rejected calls.
    RateLimitError: Error raised for HTTP 429 responses.
    BatchSizeError: Error raised when a single call exceeds 10 records.
    ErrorKind: Tag carried by every AirtableError.
    types: Module containing Pydantic models for records and options.
"""

from . import types
from .base import AirtableBase
from .client import AirtableClient
from .config import DEFAULT_BASE_URL, ClientConfig, configure_logging
from .errors import AirtableError, BatchSizeError, ErrorKind, RateLimitError
from .table import AirtableTable
from .types import (
    DeletedRecord,
    ListRecordsOptions,
    ListRecordsResponse,
    Record,
    RecordData,
    RecordUpdate,
    SortSpec,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BASE_URL",
    "AirtableBase",
    "AirtableClient",
    "AirtableError",
    "AirtableTable",
    "BatchSizeError",
    "ClientConfig",
    "DeletedRecord",
    "ErrorKind",
    "ListRecordsOptions",
    "ListRecordsResponse",
    "RateLimitError",
    "Record",
    "RecordData",
    "RecordUpdate",
    "SortSpec",
    "configure_logging",
    "types",
]

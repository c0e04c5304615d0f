"""Table operations for the Airtable REST API.

Builds endpoint URLs, encodes list options into query parameters, issues
requests through the shared :class:`~airtable_client.session.HttpSession`,
and turns failed responses into :class:`~airtable_client.errors.AirtableError`.

Multi-request operations (pagination and batched writes) run strictly
sequentially: each page request needs the previous page's offset, and write
batches are spaced by a fixed delay to stay under the per-base rate limit.
"""

import time
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog

from .errors import AirtableError, BatchSizeError, RateLimitError
from .session import HttpSession
from .types import (
    DeletedRecord,
    DeleteRecordsResponse,
    Fields,
    ListRecordsOptions,
    ListRecordsResponse,
    Record,
    RecordData,
    RecordUpdate,
)

logger = structlog.get_logger(__name__)

# Airtable rejects write requests carrying more records than this.
MAX_RECORDS_PER_REQUEST = 10

# Pause between write batches; Airtable allows 5 requests per second per base.
BATCH_DELAY_SECONDS = 0.2

T = TypeVar("T")
R = TypeVar("R")

OptionsInput = ListRecordsOptions | Mapping[str, Any] | None


def _chunks(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _check_batch_size(count: int, verb: str, batch_method: str) -> None:
    """Reject a single write request carrying too many records.

    Raises:
        BatchSizeError: If ``count`` exceeds the per-request limit.
    """
    if count > MAX_RECORDS_PER_REQUEST:
        msg = (
            f"Cannot {verb} more than {MAX_RECORDS_PER_REQUEST} records at once. "
            f"Use {batch_method}() for larger operations."
        )
        raise BatchSizeError(msg)


def _single(items: Sequence[T], operation: str) -> T:
    """Return the only item of a single-record response.

    Raises:
        AirtableError: If the API answered successfully but returned no record.
    """
    if not items:
        msg = f"Empty response from API: {operation} returned no record"
        raise AirtableError(msg)
    return items[0]


def _coerce_options(
    options: OptionsInput,
    overrides: Mapping[str, Any],
) -> ListRecordsOptions:
    """Merge an options object (or mapping) with keyword overrides."""
    if options is None:
        data: dict[str, Any] = {}
    elif isinstance(options, ListRecordsOptions):
        data = options.model_dump(exclude_none=True)
    else:
        data = dict(options)
    return ListRecordsOptions.model_validate({**data, **overrides})


def encode_list_params(
    options: ListRecordsOptions,
    offset: str | None = None,
) -> list[tuple[str, str]]:
    """Encode list options as ordered query parameters.

    Array options repeat their parameter once per element; sort entries are
    indexed as ``sort[i][field]`` and ``sort[i][direction]``. Options that are
    not set produce no parameter.

    Args:
        options: Validated list options.
        offset: Continuation token from a previous page, if any.

    Returns:
        List of ``(name, value)`` pairs suitable for ``httpx`` params.
    """
    params: list[tuple[str, str]] = []

    if options.fields is not None:
        params.extend(("fields[]", field) for field in options.fields)
    if options.filter_by_formula is not None:
        params.append(("filterByFormula", options.filter_by_formula))
    if options.max_records is not None:
        params.append(("maxRecords", str(options.max_records)))
    if options.page_size is not None:
        params.append(("pageSize", str(options.page_size)))
    if options.sort is not None:
        for index, sort in enumerate(options.sort):
            params.append((f"sort[{index}][field]", sort.field))
            params.append((f"sort[{index}][direction]", sort.direction))
    if options.view is not None:
        params.append(("view", options.view))
    if options.cell_format is not None:
        params.append(("cellFormat", options.cell_format))
    if options.time_zone is not None:
        params.append(("timeZone", options.time_zone))
    if options.user_locale is not None:
        params.append(("userLocale", options.user_locale))
    if options.return_fields_by_field_id:
        params.append(("returnFieldsByFieldId", "true"))
    if offset:
        params.append(("offset", offset))

    return params


def error_from_response(response: httpx.Response) -> AirtableError:
    """Build the error for a non-success response.

    Expects a body shaped like ``{"error": {"type": ..., "message": ...}}``.
    A bare string ``error`` is taken as the type. Bodies that are not JSON,
    or not shaped as expected, fall back to a message naming the status code.
    A 429 status always yields :class:`RateLimitError`.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = {}

    error = payload.get("error") if isinstance(payload, dict) else None
    error_type: str | None = None
    message: str | None = None
    if isinstance(error, dict):
        if isinstance(error.get("type"), str):
            error_type = error["type"]
        if isinstance(error.get("message"), str):
            message = error["message"]
    elif isinstance(error, str):
        error_type = error

    if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
        return RateLimitError(message or "Rate limit exceeded")

    return AirtableError(
        message or f"Request failed with status {response.status_code}",
        status_code=response.status_code,
        error_type=error_type,
    )


class AirtableTable:
    """Records of a single table within an Airtable base.

    Holds only immutable configuration, so one instance can be shared
    across threads.
    """

    def __init__(
        self,
        base_id: str,
        table_name: str,
        api_key: str,
        base_url: str,
        session: HttpSession | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the table handle.

        Args:
            base_id: Airtable base id (e.g. "appXXXXXXXXXXXXXX").
            table_name: Table id or name; URL-encoded in the endpoint.
            api_key: Token sent as a bearer credential.
            base_url: API root (e.g. "https://api.airtable.com/v0").
            session: Shared HTTP session; a private one is created if omitted.
            sleep: Delay function used between write batches.
        """
        self.base_id = base_id
        self.table_name = table_name
        self.base_url = base_url.rstrip("/")
        self.endpoint = f"{self.base_url}/{base_id}/{quote(table_name, safe='')}"
        self._session = session or HttpSession(api_key)
        self._sleep = sleep

    def __repr__(self) -> str:
        return (
            f"AirtableTable(base_id={self.base_id!r}, table_name={self.table_name!r})"
        )

    def _record_url(self, record_id: str) -> str:
        return f"{self.endpoint}/{quote(record_id, safe='')}"

    def _request(
        self,
        method: str,
        url: str,
        params: list[tuple[str, str]] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Make an HTTP request to the Airtable API.

        Args:
            method: HTTP method.
            url: Absolute request URL.
            params: Optional query parameters, in order.
            body: Optional JSON body.

        Returns:
            Decoded JSON response.

        Raises:
            RateLimitError: If the API responds with 429.
            AirtableError: If the API responds with any other error status.
            httpx.HTTPError: If the request itself fails.
        """
        start_time = time.time()
        logger.debug(
            "Making API request",
            method=method,
            table=self.table_name,
            url=url,
            params=params or [],
        )

        try:
            response = self._session.client.request(
                method,
                url,
                params=params,
                json=body,
            )
        except httpx.HTTPError:
            logger.exception(
                "API request failed",
                method=method,
                url=url,
                duration_seconds=round(time.time() - start_time, 3),
            )
            raise

        duration = round(time.time() - start_time, 3)
        if not response.is_success:
            error = error_from_response(response)
            logger.error(
                "API error response",
                method=method,
                url=url,
                status_code=response.status_code,
                error_type=error.error_type,
                error_message=error.message,
                duration_seconds=duration,
            )
            raise error

        logger.debug(
            "API request completed",
            status_code=response.status_code,
            duration_seconds=duration,
        )
        return response.json()

    def _run_batches(
        self,
        items: Iterable[T],
        call: Callable[[Sequence[T]], list[R]],
        operation: str,
    ) -> list[R]:
        """Apply ``call`` to consecutive chunks of ``items``.

        Chunks are sent one after another with a fixed pause between them
        (none after the last). A failing chunk aborts the remaining ones.
        """
        batches = list(_chunks(list(items), MAX_RECORDS_PER_REQUEST))
        results: list[R] = []
        for index, batch in enumerate(batches):
            if index > 0:
                self._sleep(BATCH_DELAY_SECONDS)
            results.extend(call(batch))
            logger.debug(
                "Batch completed",
                operation=operation,
                table=self.table_name,
                batch=index + 1,
                total_batches=len(batches),
                size=len(batch),
            )
        return results

    # -- reads ---------------------------------------------------------------

    def list_records(
        self,
        options: OptionsInput = None,
        *,
        offset: str | None = None,
        **options_kwargs: Any,
    ) -> ListRecordsResponse:
        """Fetch a single page of records.

        Args:
            options: List options as a model or mapping.
            offset: Continuation token from a previous page.
            **options_kwargs: Individual list options, overriding ``options``.

        Returns:
            The page; its ``offset`` is set when more pages remain.
        """
        params = encode_list_params(_coerce_options(options, options_kwargs), offset)
        data = self._request("GET", self.endpoint, params=params)
        return ListRecordsResponse.model_validate(data)

    def iterate(
        self,
        options: OptionsInput = None,
        **options_kwargs: Any,
    ) -> Iterator[list[Record]]:
        """Yield pages of records until the API stops returning an offset."""
        resolved = _coerce_options(options, options_kwargs)
        offset: str | None = None
        while True:
            page = self.list_records(resolved, offset=offset)
            yield page.records
            offset = page.offset
            if not offset:
                return

    def select(
        self,
        options: OptionsInput = None,
        **options_kwargs: Any,
    ) -> list[Record]:
        """Fetch every record matching the options, across all pages."""
        records: list[Record] = []
        for page in self.iterate(options, **options_kwargs):
            records.extend(page)
        return records

    def find(self, record_id: str) -> Record:
        """Fetch one record by id."""
        data = self._request("GET", self._record_url(record_id))
        return Record.model_validate(data)

    # -- creates -------------------------------------------------------------

    def create(
        self,
        record: RecordData | Mapping[str, Any],
        *,
        typecast: bool = False,
    ) -> Record:
        """Create one record."""
        return _single(self.create_records([record], typecast=typecast), "create")

    def create_records(
        self,
        records: Sequence[RecordData | Mapping[str, Any]],
        *,
        typecast: bool = False,
    ) -> list[Record]:
        """Create up to 10 records in one request.

        Raises:
            BatchSizeError: If more than 10 records are given; nothing is sent.
        """
        _check_batch_size(len(records), "create", "create_batch")

        body: dict[str, Any] = {
            "records": [
                RecordData.model_validate(record).model_dump(
                    by_alias=True,
                    exclude_none=True,
                )
                for record in records
            ],
        }
        if typecast:
            body["typecast"] = True

        data = self._request("POST", self.endpoint, body=body)
        return [Record.model_validate(item) for item in data.get("records", [])]

    def create_batch(
        self,
        records: Iterable[RecordData | Mapping[str, Any]],
        *,
        typecast: bool = False,
    ) -> list[Record]:
        """Create any number of records, 10 per request."""
        return self._run_batches(
            records,
            lambda batch: self.create_records(batch, typecast=typecast),
            operation="create",
        )

    # -- updates -------------------------------------------------------------

    def update(
        self,
        record_id: str,
        fields: Fields,
        *,
        typecast: bool = False,
    ) -> Record:
        """Merge ``fields`` into one record; unspecified fields are kept."""
        update = RecordUpdate(id=record_id, fields=fields)
        return _single(self.update_records([update], typecast=typecast), "update")

    def update_records(
        self,
        records: Sequence[RecordUpdate | Mapping[str, Any]],
        *,
        typecast: bool = False,
    ) -> list[Record]:
        """Partially update up to 10 records in one request.

        Raises:
            BatchSizeError: If more than 10 records are given; nothing is sent.
        """
        _check_batch_size(len(records), "update", "update_batch")

        body: dict[str, Any] = {
            "records": [
                RecordUpdate.model_validate(record).model_dump() for record in records
            ],
        }
        if typecast:
            body["typecast"] = True

        data = self._request("PATCH", self.endpoint, body=body)
        return [Record.model_validate(item) for item in data.get("records", [])]

    def update_batch(
        self,
        records: Iterable[RecordUpdate | Mapping[str, Any]],
        *,
        typecast: bool = False,
    ) -> list[Record]:
        """Partially update any number of records, 10 per request."""
        return self._run_batches(
            records,
            lambda batch: self.update_records(batch, typecast=typecast),
            operation="update",
        )

    def replace(self, record_id: str, fields: Fields) -> Record:
        """Overwrite one record; fields not given are cleared by the API."""
        data = self._request(
            "PUT",
            self._record_url(record_id),
            body={"fields": fields},
        )
        return Record.model_validate(data)

    # -- deletes -------------------------------------------------------------

    def delete(self, record_id: str) -> DeletedRecord:
        """Delete one record."""
        return _single(self.delete_records([record_id]).records, "delete")

    def delete_records(self, record_ids: Sequence[str]) -> DeleteRecordsResponse:
        """Delete up to 10 records in one request.

        Ids are sent as repeated ``records[]`` query parameters; the request
        has no body.

        Raises:
            BatchSizeError: If more than 10 ids are given; nothing is sent.
        """
        _check_batch_size(len(record_ids), "delete", "delete_batch")

        params = [("records[]", record_id) for record_id in record_ids]
        data = self._request("DELETE", self.endpoint, params=params)
        return DeleteRecordsResponse.model_validate(data)

    def delete_batch(self, record_ids: Iterable[str]) -> list[DeletedRecord]:
        """Delete any number of records, 10 per request."""
        return self._run_batches(
            record_ids,
            lambda batch: self.delete_records(batch).records,
            operation="delete",
        )

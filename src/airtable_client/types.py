"""Record and option types for the Airtable REST API.

Pydantic models describing what the API returns and what the client sends.
Field values are left as an open mapping; callers cast them at the boundary.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Fields = dict[str, Any]


class Record(BaseModel):
    """A record as returned by the API.

    Extra keys the API may include (e.g. ``commentCount``) are ignored.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created_time: str = Field(alias="createdTime")
    fields: Fields = Field(default_factory=dict)


class RecordData(BaseModel):
    """Input for creating a record.

    ``id`` and ``created_time`` are echoed back by the service and are not
    normally supplied.
    """

    model_config = ConfigDict(populate_by_name=True)

    fields: Fields
    id: str | None = None
    created_time: str | None = Field(None, alias="createdTime")


class RecordUpdate(BaseModel):
    """Input for a partial update of an existing record."""

    id: str
    fields: Fields


class SortSpec(BaseModel):
    """One sort key for a list request."""

    field: str
    direction: Literal["asc", "desc"] = "asc"


class ListRecordsOptions(BaseModel):
    """Filtering, sorting and formatting options for listing records.

    Every option maps to one query parameter; unset options are not sent.
    """

    model_config = ConfigDict(extra="forbid")

    fields: list[str] | None = None
    filter_by_formula: str | None = None
    max_records: int | None = None
    page_size: int | None = None
    sort: list[SortSpec] | None = None
    view: str | None = None
    cell_format: Literal["json", "string"] | None = None
    time_zone: str | None = None
    user_locale: str | None = None
    return_fields_by_field_id: bool | None = None


class ListRecordsResponse(BaseModel):
    """One page of records. ``offset`` is set when more pages remain."""

    records: list[Record] = Field(default_factory=list)
    offset: str | None = None


class DeletedRecord(BaseModel):
    id: str
    deleted: bool


class DeleteRecordsResponse(BaseModel):
    records: list[DeletedRecord] = Field(default_factory=list)

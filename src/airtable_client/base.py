"""Airtable base handle."""

from .session import HttpSession
from .table import AirtableTable


class AirtableBase:
    """A base: a named collection of tables.

    Pure factory for :class:`AirtableTable` handles; performs no I/O.
    """

    def __init__(
        self,
        base_id: str,
        api_key: str,
        base_url: str,
        session: HttpSession | None = None,
    ):
        self._base_id = base_id
        self._api_key = api_key
        self._base_url = base_url
        self._session = session or HttpSession(api_key)

    @property
    def base_id(self) -> str:
        return self._base_id

    def __repr__(self) -> str:
        return f"AirtableBase(base_id={self._base_id!r})"

    def table(self, table_id_or_name: str) -> AirtableTable:
        """Get a handle for a table by id or name."""
        return AirtableTable(
            base_id=self._base_id,
            table_name=table_id_or_name,
            api_key=self._api_key,
            base_url=self._base_url,
            session=self._session,
        )

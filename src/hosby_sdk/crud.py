"""
Table-level CRUD operations

Thin wrappers over ``HosbyClient.request``: each method validates its own
arguments, then forwards to ``{table}/{operation}`` with the matching verb.
"""

from typing import Any, Awaitable, Optional, Protocol, Sequence

from .exceptions import ValidationError
from .http_clients.dispatcher import FilterLike, OptionsLike
from .types import ApiResponse, QueryOptions


class Requester(Protocol):
    def request(
        self,
        method: str,
        path: str,
        filters: Optional[Sequence[FilterLike]] = None,
        options: Optional[OptionsLike] = None,
        body: Any = None,
    ) -> Awaitable[ApiResponse]: ...


def _require_table(table: Any) -> None:
    if not table or not isinstance(table, str):
        raise ValidationError("Table name is required")


def _require_filters(table: Any, filters: Optional[Sequence[FilterLike]], message: str) -> None:
    if not table or not isinstance(table, str) or not filters:
        raise ValidationError(message)


class CrudClient:
    """
    CRUD query builder bound to a requester

    Args:
        requester: Object exposing the ``request`` coroutine (usually a ``HosbyClient``)
    """

    def __init__(self, requester: Requester):
        if requester is None:
            raise ValidationError("Requester instance is required")
        self.requester = requester

    async def _call(
        self,
        method: str,
        table: str,
        operation: str,
        filters: Optional[Sequence[FilterLike]] = None,
        options: Optional[OptionsLike] = None,
        body: Any = None,
    ) -> ApiResponse:
        return await self.requester.request(method, f"{table}/{operation}", filters, options, body)

    # Reads

    async def find(
        self,
        table: str,
        filters: Optional[Sequence[FilterLike]] = None,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        """
        Find documents matching the filters.

        Args:
            table: Table/collection name
            filters: Field filters
            options: populate, skip, limit, query and slice options

        Returns:
            ApiResponse: Envelope whose ``data`` holds the matching documents
        """
        _require_table(table)
        return await self._call('GET', table, 'find', filters, options)

    async def find_by_id(self, table: str, filters: Sequence[FilterLike]) -> ApiResponse:
        """Find a document by id; ``filters`` must carry the id filter."""
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'findById', filters)

    async def find_by_email(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and filter 'email' are required")
        return await self._call('GET', table, 'findByEmail', filters, options)

    async def find_by_token(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and filter 'token' are required")
        return await self._call('GET', table, 'findByToken', filters, options)

    async def find_by_field(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'findByField', filters, options)

    async def find_greater_than(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'findGreaterThan', filters, options)

    async def find_less_than(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'findLessThan', filters, options)

    async def find_equal(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'findEqual', filters, options)

    async def find_and_populate(
        self,
        table: str,
        filters: Optional[Sequence[FilterLike]],
        options: OptionsLike,
    ) -> ApiResponse:
        """Find documents and populate referenced fields; ``options.populate`` is mandatory."""
        populate = options.populate if isinstance(options, QueryOptions) else (options or {}).get('populate')
        if not table or not isinstance(table, str) or not populate:
            raise ValidationError("Table name and populate options are required")
        return await self._call('GET', table, 'findAndPopulate', filters, options)

    async def count(self, table: str, filters: Optional[Sequence[FilterLike]] = None) -> ApiResponse:
        _require_table(table)
        return await self._call('GET', table, 'count', filters)

    async def aggregate(
        self,
        table: str,
        filters: Optional[Sequence[FilterLike]] = None,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_table(table)
        return await self._call('GET', table, 'aggregate', filters, options)

    async def distinct(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table name and query filters are required")
        return await self._call('GET', table, 'distinct', filters, options)

    # Creates

    async def insert_one(self, table: str, data: Any, options: Optional[OptionsLike] = None) -> ApiResponse:
        if not table or not isinstance(table, str) or not data:
            raise ValidationError("Table and data are required")
        return await self._call('POST', table, 'insertOne', None, options, data)

    async def insert_many(self, table: str, data: Sequence[Any], options: Optional[OptionsLike] = None) -> ApiResponse:
        if not table or not isinstance(table, str) or not data:
            raise ValidationError("Table and data are required")
        return await self._call('POST', table, 'insertMany', None, options, list(data))

    async def upsert(
        self,
        table: str,
        filters: Sequence[FilterLike],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        """Insert ``data`` or update the document matching ``filters``."""
        _require_table(table)
        if not filters:
            raise ValidationError("At least one filter is required for upsert")
        return await self._call('POST', table, 'upsert', filters, options, data)

    # Replaces

    async def replace_one(
        self,
        table: str,
        filters: Sequence[FilterLike],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table and filters are required")
        return await self._call('PUT', table, 'replaceOne', filters, options, data)

    async def find_one_and_replace(
        self,
        table: str,
        filters: Sequence[FilterLike],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_table(table)
        if not filters:
            raise ValidationError("At least one filter is required for findOneAndReplace")
        return await self._call('PUT', table, 'findOneAndReplace', filters, options, data)

    # Updates

    async def update_one(
        self,
        table: str,
        filters: Sequence[FilterLike],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table and filters are required")
        return await self._call('PATCH', table, 'updateOne', filters, options, data)

    async def update_many(
        self,
        table: str,
        filters: Optional[Sequence[FilterLike]],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_table(table)
        return await self._call('PATCH', table, 'updateMany', filters, options, data)

    async def find_one_and_update(
        self,
        table: str,
        filters: Sequence[FilterLike],
        data: Any,
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table and query filters are required")
        return await self._call('PATCH', table, 'findOneAndUpdate', filters, options, data)

    # Deletes

    async def delete_one(self, table: str, filters: Sequence[FilterLike]) -> ApiResponse:
        _require_filters(table, filters, "Table and filters are required")
        return await self._call('DELETE', table, 'deleteOne', filters)

    async def delete_many(self, table: str, filters: Sequence[FilterLike]) -> ApiResponse:
        _require_filters(table, filters, "Table and query filters are required")
        return await self._call('DELETE', table, 'deleteMany', filters)

    async def find_one_and_delete(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table and query filters are required")
        return await self._call('DELETE', table, 'findOneAndDelete', filters, options)

    async def delete_by_field(self, table: str, filters: Sequence[FilterLike]) -> ApiResponse:
        _require_filters(table, filters, "Table and query filters are required")
        return await self._call('DELETE', table, 'deleteByField', filters)

    async def delete_by_token(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        """Delete the document matching a token field filter (e.g. ``resetPasswordToken``)."""
        _require_filters(table, filters, "Table and query filter 'token' are required")
        return await self._call('DELETE', table, 'deleteByToken', filters, options)

    async def delete_by_id(
        self,
        table: str,
        filters: Sequence[FilterLike],
        options: Optional[OptionsLike] = None,
    ) -> ApiResponse:
        _require_filters(table, filters, "Table and query filter 'id' are required")
        return await self._call('DELETE', table, 'delete', filters, options)

    # Bulk

    async def bulk_insert(self, table: str, data: Sequence[Any]) -> ApiResponse:
        if not table or not isinstance(table, str) or not data:
            raise ValidationError("Table and data array are required")
        return await self._call('POST', table, 'bulkInsert', body=list(data))

    async def bulk_update(
        self,
        table: str,
        filters: Optional[Sequence[FilterLike]],
        data: Any,
    ) -> ApiResponse:
        _require_table(table)
        return await self._call('PUT', table, 'bulkUpdate', filters, body=data)

    async def bulk_delete(self, table: str, filters: Sequence[FilterLike]) -> ApiResponse:
        _require_table(table)
        if not filters:
            raise ValidationError("At least one filter is required for bulk delete")
        return await self._call('DELETE', table, 'bulkDelete', filters)

"""
Tests for table-level CRUD operations
"""

from unittest.mock import AsyncMock

import pytest

from conftest import FakeTransport, body_of, csrf_response, ok_response
from hosby_sdk import HosbyClient
from hosby_sdk.crud import CrudClient
from hosby_sdk.exceptions import ValidationError
from hosby_sdk.types import QueryOptions


@pytest.fixture
def requester():
    requester = AsyncMock()
    requester.request.return_value = {'success': True, 'status': 200, 'data': []}
    return requester


@pytest.fixture
def crud(requester):
    return CrudClient(requester)


FILTERS = [{'field': 'email', 'value': 'a@x.io'}]


class TestCrudRouting:
    """Each operation maps to one verb and path"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,method,path", [
        ('find', 'GET', 'users/find'),
        ('find_by_id', 'GET', 'users/findById'),
        ('find_by_email', 'GET', 'users/findByEmail'),
        ('find_by_token', 'GET', 'users/findByToken'),
        ('find_by_field', 'GET', 'users/findByField'),
        ('find_greater_than', 'GET', 'users/findGreaterThan'),
        ('find_less_than', 'GET', 'users/findLessThan'),
        ('find_equal', 'GET', 'users/findEqual'),
        ('count', 'GET', 'users/count'),
        ('aggregate', 'GET', 'users/aggregate'),
        ('distinct', 'GET', 'users/distinct'),
        ('delete_one', 'DELETE', 'users/deleteOne'),
        ('delete_many', 'DELETE', 'users/deleteMany'),
        ('find_one_and_delete', 'DELETE', 'users/findOneAndDelete'),
        ('delete_by_field', 'DELETE', 'users/deleteByField'),
        ('delete_by_token', 'DELETE', 'users/deleteByToken'),
        ('delete_by_id', 'DELETE', 'users/delete'),
        ('bulk_delete', 'DELETE', 'users/bulkDelete'),
    ])
    async def test_filter_operations(self, crud, requester, operation, method, path):
        await getattr(crud, operation)('users', FILTERS)

        args = requester.request.call_args[0]
        assert args[0] == method
        assert args[1] == path
        assert args[2] == FILTERS

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,method,path", [
        ('upsert', 'POST', 'users/upsert'),
        ('replace_one', 'PUT', 'users/replaceOne'),
        ('find_one_and_replace', 'PUT', 'users/findOneAndReplace'),
        ('update_one', 'PATCH', 'users/updateOne'),
        ('update_many', 'PATCH', 'users/updateMany'),
        ('find_one_and_update', 'PATCH', 'users/findOneAndUpdate'),
        ('bulk_update', 'PUT', 'users/bulkUpdate'),
    ])
    async def test_write_operations(self, crud, requester, operation, method, path):
        await getattr(crud, operation)('users', FILTERS, {'name': 'b'})

        args = requester.request.call_args[0]
        assert args[:3] == (method, path, FILTERS)
        assert args[4] == {'name': 'b'}

    @pytest.mark.asyncio
    async def test_insert_one(self, crud, requester):
        await crud.insert_one('users', {'name': 'a'})
        requester.request.assert_awaited_once_with('POST', 'users/insertOne', None, None, {'name': 'a'})

    @pytest.mark.asyncio
    async def test_insert_many(self, crud, requester):
        await crud.insert_many('users', ({'name': 'a'}, {'name': 'b'}))
        assert requester.request.call_args[0][4] == [{'name': 'a'}, {'name': 'b'}]

    @pytest.mark.asyncio
    async def test_bulk_insert(self, crud, requester):
        await crud.bulk_insert('users', [{'name': 'a'}])
        requester.request.assert_awaited_once_with('POST', 'users/bulkInsert', None, None, [{'name': 'a'}])

    @pytest.mark.asyncio
    async def test_find_passes_options(self, crud, requester):
        options = QueryOptions(limit=5)
        await crud.find('users', None, options)
        requester.request.assert_awaited_once_with('GET', 'users/find', None, options, None)

    @pytest.mark.asyncio
    async def test_find_and_populate(self, crud, requester):
        await crud.find_and_populate('posts', None, {'populate': ['author']})
        assert requester.request.call_args[0][1] == 'posts/findAndPopulate'


class TestCrudValidation:
    """Argument validation happens before any request"""

    def test_requester_required(self):
        with pytest.raises(ValidationError):
            CrudClient(None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call,message", [
        (lambda c: c.find(''), "Table name is required"),
        (lambda c: c.find_by_id('users', []), "query filters are required"),
        (lambda c: c.find_by_email('users', []), "filter 'email' are required"),
        (lambda c: c.find_and_populate('posts', None, {}), "populate options are required"),
        (lambda c: c.find_and_populate('posts', None, QueryOptions()), "populate options are required"),
        (lambda c: c.insert_one('users', None), "Table and data are required"),
        (lambda c: c.insert_many('users', []), "Table and data are required"),
        (lambda c: c.upsert('users', [], {}), "At least one filter is required for upsert"),
        (lambda c: c.find_one_and_replace('users', [], {}), "At least one filter is required for findOneAndReplace"),
        (lambda c: c.update_one('users', [], {}), "Table and filters are required"),
        (lambda c: c.delete_by_token('users', []), "query filter 'token' are required"),
        (lambda c: c.delete_by_id(None, FILTERS), "query filter 'id' are required"),
        (lambda c: c.bulk_insert('users', []), "Table and data array are required"),
        (lambda c: c.bulk_delete('users', []), "At least one filter is required for bulk delete"),
    ])
    async def test_rejected(self, crud, requester, call, message):
        with pytest.raises(ValidationError, match=message):
            await call(crud)
        requester.request.assert_not_called()


class TestCrudThroughClient:
    """CRUD calls go through the authenticated pipeline"""

    @pytest.mark.asyncio
    async def test_insert_one_wire_request(self, client_settings):
        transport = FakeTransport(csrf_response('T1'), ok_response({'_id': '1'}))
        client = HosbyClient(client_settings, transport=transport)

        result = await client.crud.insert_one('users', {'name': 'a'})

        call = transport.calls[1]
        assert result['data'] == {'_id': '1'}
        assert call['method'] == 'POST'
        assert call['url'] == 'https://api.hosby.io/shop/users/insertOne/'
        assert call['headers']['x-csrf-token'] == 'T1'
        assert body_of(call) == {'name': 'a'}

    @pytest.mark.asyncio
    async def test_find_by_email_query_string(self, client_settings):
        transport = FakeTransport(csrf_response(), ok_response())
        client = HosbyClient(client_settings, transport=transport)

        await client.crud.find_by_email('users', FILTERS, {'limit': 1})

        call = transport.calls[1]
        assert call['url'] == 'https://api.hosby.io/shop/users/findByEmail/?email=a%40x.io'
        assert call['headers']['x-limit'] == '1'

"""
End-to-end tests for HosbyClient
"""

import logging
from itertools import count
from unittest.mock import Mock

import pytest

from conftest import FakeResponse, FakeTransport, csrf_response, ok_response
from hosby_sdk import HosbyClient, create_client
from hosby_sdk.config import ClientConfig
from hosby_sdk.cookies import MemoryCookieStore
from hosby_sdk.crud import CrudClient
from hosby_sdk.exceptions import ConfigError, TokenError
from hosby_sdk.http_clients import HttpxTransport
from hosby_sdk.signing import verify_signature


class TestClientConstruction:
    """Test HosbyClient construction"""

    def test_missing_config(self):
        with pytest.raises(ConfigError, match="Configuration is required"):
            HosbyClient(None)

    def test_from_mapping(self, client_settings):
        client = HosbyClient(client_settings, transport=FakeTransport())
        assert isinstance(client.config, ClientConfig)
        assert client.identity.api_key == 'key1_proj1_user1'

    def test_strict_https_rejects_http(self, client_settings):
        client_settings.update(base_url='http://api.hosby.io', https_mode='strict')
        with pytest.raises(ConfigError, match="HTTPS protocol is required"):
            HosbyClient(client_settings, transport=FakeTransport())

    @pytest.mark.parametrize("base_url", ['http://localhost:3000', 'http://box.local', 'http://api.hosby.test'])
    def test_strict_https_exempt_hosts(self, client_settings, base_url):
        client_settings.update(base_url=base_url, https_mode='strict')
        HosbyClient(client_settings, transport=FakeTransport())

    def test_default_mode_rejects_http(self, client_settings):
        client_settings['base_url'] = 'http://api.hosby.io'
        with pytest.raises(ConfigError, match="insecure HTTP connection"):
            HosbyClient(client_settings, transport=FakeTransport())

    def test_warn_log_mode_constructs(self, client_settings, caplog):
        client_settings.update(base_url='http://api.hosby.io', https_mode='warn-log')
        with caplog.at_level(logging.WARNING):
            HosbyClient(client_settings, transport=FakeTransport())
        assert 'insecure HTTP connection' in caplog.text

    def test_default_transport(self, client_settings):
        client = HosbyClient(ClientConfig(**client_settings, timeout=5.0, retry_attempts=2))
        assert isinstance(client.transport, HttpxTransport)

    def test_crud_is_cached(self, client_settings):
        client = HosbyClient(client_settings, transport=FakeTransport())
        assert isinstance(client.crud, CrudClient)
        assert client.crud is client.crud

    def test_create_client_splits_collaborators(self, client_settings):
        transport = FakeTransport()
        client = create_client(**client_settings, transport=transport, use_same_token=True)

        assert client.transport is transport
        assert client.config.use_same_token is True
        assert client.csrf.rotation_enabled is False


class TestClientFlow:
    """Test the init and request flow"""

    @pytest.mark.asyncio
    async def test_init_then_request(self, client_settings, public_key_pem):
        """init caches the token; later requests carry it with a fresh signature"""
        timestamps = count(1700000000000)
        transport = FakeTransport(csrf_response('T1'), ok_response(), ok_response())
        client = HosbyClient(
            client_settings,
            transport=transport,
            timestamp_generator=lambda: next(timestamps),
        )

        await client.init()
        assert client.csrf_token == 'T1'

        await client.request('GET', 'users/find')
        await client.request('GET', 'users/find')

        first, second = transport.calls[1]['headers'], transport.calls[2]['headers']
        for headers in (first, second):
            assert headers['x-csrf-token'] == 'T1'
            assert verify_signature(f"{headers['x-api-key']}:{headers['x-timestamp']}",
                                    headers['x-signature'], public_key_pem)
        assert first['x-timestamp'] != second['x-timestamp']
        assert first['x-signature'] != second['x-signature']
        assert client.last_request.url == 'https://api.hosby.io/shop/users/find/'

    @pytest.mark.asyncio
    async def test_init_failure(self, client_settings):
        transport = FakeTransport(FakeResponse(200, {'success': False}))
        client = HosbyClient(client_settings, transport=transport)

        with pytest.raises(TokenError, match="Failed to fetch CSRF token"):
            await client.init()
        assert client.csrf_token is None

    @pytest.mark.asyncio
    async def test_init_rejects_non_object_body(self, client_settings):
        client = HosbyClient(client_settings, transport=FakeTransport(FakeResponse(200, ['x'])))

        with pytest.raises(TokenError, match="Failed to fetch CSRF token"):
            await client.init()

    @pytest.mark.asyncio
    async def test_init_adopts_shared_cookie(self, client_settings):
        store = MemoryCookieStore()
        store.set('hosby_csrf_token', 'SHARED')
        transport = FakeTransport()
        client = HosbyClient(client_settings, transport=transport, cookie_store=store)

        await client.init()
        assert client.csrf_token == 'SHARED'
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_injected_signer(self, client_settings):
        signer = Mock()
        signer.sign.return_value = 'STUB'
        transport = FakeTransport(csrf_response(), ok_response())
        client = HosbyClient(client_settings, transport=transport, signer=signer,
                             timestamp_generator=lambda: 42)

        await client.request('GET', 'users/find')
        assert transport.calls[1]['headers']['x-signature'] == 'STUB'
        signer.sign.assert_called_with('key1_proj1_user1:42', client_settings['private_key'])

    @pytest.mark.asyncio
    async def test_bearer_token_exposed(self, client_settings):
        transport = FakeTransport(csrf_response(), ok_response(headers={'Authorization': 'Bearer B1'}))
        client = HosbyClient(client_settings, transport=transport)

        await client.request('POST', 'auth/login', body={})
        assert client.bearer_token == 'B1'

    @pytest.mark.asyncio
    async def test_context_manager_leaves_injected_transport_open(self, client_settings):
        transport = FakeTransport()
        async with HosbyClient(client_settings, transport=transport):
            pass
        assert not transport.closed

    @pytest.mark.asyncio
    async def test_context_manager_closes_default_transport(self, client_settings):
        async with HosbyClient(client_settings) as client:
            transport = client.transport
        assert transport.client.is_closed

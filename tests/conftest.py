"""
Shared fixtures for the Hosby SDK test suite
"""

import json
from typing import Any, Dict, List, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from hosby_sdk.types import ClientIdentity


class FakeResponse:
    """Minimal TransportResponse used by the dispatcher tests"""

    def __init__(self, status: int = 200, payload: Any = None, headers: Optional[Dict[str, str]] = None,
                 status_text: str = 'OK', json_error: Optional[Exception] = None):
        self.status = status
        self.ok = 200 <= status < 300
        self.status_text = status_text
        self.headers = headers or {}
        self._payload = payload
        self._json_error = json_error

    async def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeTransport:
    """Records every call and replays queued responses (or raises queued exceptions)"""

    def __init__(self, *responses):
        self.responses: List[Any] = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, *responses) -> None:
        self.responses.extend(responses)

    async def __call__(self, url, *, method, headers, body=None):
        self.calls.append({'url': url, 'method': method, 'headers': dict(headers), 'body': body})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def aclose(self):
        self.closed = True


def csrf_response(token: str = 'T1', headers: Optional[Dict[str, str]] = None) -> FakeResponse:
    return FakeResponse(200, {'success': True, 'status': 200, 'data': {'token': token}}, headers)


def ok_response(data: Any = None, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
    return FakeResponse(200, {'success': True, 'status': 200, 'data': data if data is not None else []}, headers)


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode('ascii')


@pytest.fixture(scope="session")
def public_key_pem(rsa_private_key) -> str:
    return rsa_private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode('ascii')


@pytest.fixture
def identity(private_key_pem) -> ClientIdentity:
    return ClientIdentity(
        private_key=private_key_pem,
        api_key_id='key1',
        project_id='proj1',
        project_name='shop',
        user_id='user1',
    )


@pytest.fixture
def client_settings(private_key_pem) -> Dict[str, Any]:
    return {
        'base_url': 'https://api.hosby.io',
        'private_key': private_key_pem,
        'api_key_id': 'key1',
        'project_id': 'proj1',
        'project_name': 'shop',
        'user_id': 'user1',
    }


def body_of(call: Dict[str, Any]) -> Any:
    return json.loads(call['body']) if call['body'] is not None else None

"""
Authenticator login and logout

A successful login returns the session credential in the ``Authorization``
response header; the dispatcher captures it and replays it as a bearer token
on every following request.
"""

from typing import Any

from .crud import Requester
from .exceptions import ValidationError
from .types import ApiResponse


def _valid_name(value: Any) -> bool:
    return bool(value) and isinstance(value, str)


class AuthClient:
    """
    Login/logout against a table's authenticator

    Args:
        requester: Object exposing the ``request`` coroutine (usually a ``HosbyClient``)
    """

    def __init__(self, requester: Requester):
        if requester is None:
            raise ValidationError("Requester instance is required")
        self.requester = requester

    async def login(self, authenticator_id: str, table: str, data: Any) -> ApiResponse:
        """
        Log a user in through an authenticator.

        Args:
            authenticator_id: Identifier of the authentication method
            table: Table/collection holding the users
            data: Credentials sent as the JSON body

        Returns:
            ApiResponse: Login envelope

        Raises:
            ValidationError: If the table, authenticator or data is missing
        """
        if not _valid_name(table) or not _valid_name(authenticator_id) or not data:
            raise ValidationError("Table and data are required")
        return await self.requester.request('POST', f"{table}/{authenticator_id}/login", None, None, data)

    async def logout(self, authenticator_id: str, table: str) -> ApiResponse:
        """End the session opened by ``login``."""
        if not _valid_name(table) or not _valid_name(authenticator_id):
            raise ValidationError("Table is required")
        return await self.requester.request('GET', f"{table}/{authenticator_id}/logout", None, None, None)

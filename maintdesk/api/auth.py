"""Current user (read-only): ``/api/v1/auth/user``.

Login/logout and token handling belong to the transport, not to this module.
"""

from __future__ import annotations

import asyncio
from typing import Literal

from typing_extensions import NotRequired, TypedDict

from ._api_http import API_PREFIX, request_json
from ._api_result import Payload, ok
from .errors import error_payload
from .types import parse_single


class UserSite(TypedDict):
    id: int
    name: str
    is_headquarters: bool


class User(TypedDict):
    id: int
    username: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    locale: Literal["fr", "en"]
    current_site_id: NotRequired[int | None]
    roles: list[str]
    permissions: list[str]
    sites: list[UserSite]


class AuthRepository:
    async def get_user(self) -> User:
        body = await request_json("GET", f"{API_PREFIX}/auth/user")
        return parse_single(body)


class AuthManager:
    def __init__(self, repository: AuthRepository):
        self.repository = repository

    async def get_user(self) -> Payload[User]:
        try:
            return ok(await self.repository.get_user())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return error_payload(exc, op="auth.get_user")


auth_repository = AuthRepository()
auth_manager = AuthManager(auth_repository)

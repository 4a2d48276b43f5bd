"""
Users REST API.
"""

from pigeon_bot.models.user import User
from pigeon_bot.transport.http import HttpClient


class UsersAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def get(self, user_id: int) -> User:
        """GET /users/{id}"""
        return User.model_validate(await self._http.get(f"/users/{user_id}"))

    async def me(self) -> User:
        """GET /users/me — the bot's own account."""
        return User.model_validate(await self._http.get("/users/me"))

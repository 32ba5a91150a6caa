"""User storage used by the example handlers."""

from __future__ import annotations

from typing import Protocol

from examples.user_api.definition import User


class UserRepo(Protocol):
    async def get(self, user_id: int) -> User | None: ...

    async def create(self, *, name: str, email: str) -> User: ...


class InMemoryUserRepo:
    """Process-local repository; ids start at 1."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._next_id = 1

    async def get(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def create(self, *, name: str, email: str) -> User:
        user = User(id=self._next_id, name=name, email=email)
        self._next_id += 1
        self._users[user.id] = user
        return user

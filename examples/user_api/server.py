"""FastAPI application for the user service.

Run with: apicontract serve examples.user_api.server:create_app
"""

from __future__ import annotations

from fastapi import FastAPI

from apicontract.transport.fastapi_adapter import mount_fastapi_app
from examples.user_api.router import AppContext, build_router
from examples.user_api.user_repo import InMemoryUserRepo, UserRepo


def create_app(user_repo: UserRepo | None = None) -> FastAPI:
    app = FastAPI(title="apicontract example: users")
    context = AppContext(user_repo=user_repo or InMemoryUserRepo())
    mount_fastapi_app(
        app=app,
        router=build_router(),
        make_context=lambda _request: context,
    )
    return app

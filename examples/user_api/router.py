"""Server routes for the user service."""

from __future__ import annotations

from dataclasses import dataclass

from apicontract import HandlerRequest, ImplementedRouter, define_router
from examples.user_api.definition import User, catalog
from examples.user_api.user_repo import UserRepo


@dataclass(frozen=True, slots=True)
class AppContext:
    user_repo: UserRepo


router = define_router(catalog)


async def _create_user(req: HandlerRequest) -> User:
    return await req.context.user_repo.create(name=req.data.name, email=req.data.email)


async def _get_user(req: HandlerRequest) -> User | None:
    if req.data.id <= 0:
        raise ValueError("Invalid user ID")
    return await req.context.user_repo.get(req.data.id)


create_user = router.operation("createUser").handle(_create_user)
get_user = router.operation("getUser").handle(_get_user)


def build_router() -> ImplementedRouter:
    return router.implement(createUser=create_user, getUser=get_user)

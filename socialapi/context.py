"""
Per-request context.

Services are built once at startup around an explicit session factory and kept
on ``app.state.services``. Every request gets a RequestContext carrying those
services plus the caller identity resolved from the Authorization header
(None for anonymous or invalid callers).
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialapi.config import Settings
from socialapi.errors import Unauthenticated
from socialapi.schemas import PublicUser
from socialapi.services import FollowService, PostsService, UsersService


@dataclass(frozen=True)
class Services:
    sessions: async_sessionmaker[AsyncSession]
    users: UsersService
    follows: FollowService
    posts: PostsService


@dataclass(frozen=True)
class RequestContext:
    sessions: async_sessionmaker[AsyncSession]
    users: UsersService
    follows: FollowService
    posts: PostsService
    current_user: Optional[PublicUser]


def build_services(sessions: async_sessionmaker[AsyncSession], settings: Settings) -> Services:
    return Services(
        sessions=sessions,
        users=UsersService(sessions, settings),
        follows=FollowService(sessions),
        posts=PostsService(sessions),
    )


async def get_context(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> RequestContext:
    """FastAPI dependency: resolve the caller once and expose the services."""
    services: Services = request.app.state.services
    current_user = await services.users.resolve_identity(authorization)
    return RequestContext(
        sessions=services.sessions,
        users=services.users,
        follows=services.follows,
        posts=services.posts,
        current_user=current_user,
    )


def require_user(ctx: RequestContext, message: str) -> PublicUser:
    if ctx.current_user is None:
        raise Unauthenticated(message)
    return ctx.current_user

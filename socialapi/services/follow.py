"""
Social graph service: directed follow edges between accounts.
"""
import logging

from opentelemetry import trace
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialapi.errors import BadRequest, InternalError, translate_integrity_error
from socialapi.models import Relation, User
from socialapi.schemas import PublicUser
from socialapi.telemetry import FOLLOW_EVENTS_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

FOLLOW_FAILED = "An error occurred while trying to follow."
UNFOLLOW_FAILED = "An error occurred while trying to unfollow."


class FollowService:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def follow(self, target_user_id: str, current_user: PublicUser) -> None:
        """
        Create the edge current_user → target.

        An existing edge is detected by the composite primary key, not by a
        prior lookup; a racing duplicate therefore fails the same way.
        """
        with tracer.start_as_current_span("follow_user") as span:
            span.set_attribute("relation.follower_id", current_user.id)
            span.set_attribute("relation.following_id", target_user_id)

            if current_user.id == target_user_id:
                raise BadRequest("You cannot follow yourself")

            async with self._sessions() as session:
                session.add(Relation(follower_id=current_user.id, following_id=target_user_id))
                try:
                    await session.commit()
                except IntegrityError as exc:
                    await session.rollback()
                    raise translate_integrity_error(exc, "relations", FOLLOW_FAILED) from exc
                except SQLAlchemyError as exc:
                    logger.error("Follow %s → %s failed: %s", current_user.id, target_user_id, exc)
                    raise InternalError(FOLLOW_FAILED) from exc

            FOLLOW_EVENTS_TOTAL.labels(action="follow").inc()
            logger.info("%s followed %s", current_user.id, target_user_id)

    async def unfollow(self, target_user_id: str, current_user: PublicUser) -> None:
        with tracer.start_as_current_span("unfollow_user"):
            async with self._sessions() as session:
                try:
                    result = await session.execute(
                        delete(Relation).where(
                            Relation.follower_id == current_user.id,
                            Relation.following_id == target_user_id,
                        )
                    )
                    await session.commit()
                except SQLAlchemyError as exc:
                    logger.error("Unfollow %s → %s failed: %s", current_user.id, target_user_id, exc)
                    raise InternalError(UNFOLLOW_FAILED) from exc

            if result.rowcount == 0:
                raise BadRequest("You are not following this user")

            FOLLOW_EVENTS_TOTAL.labels(action="unfollow").inc()
            logger.info("%s unfollowed %s", current_user.id, target_user_id)

    async def get_following(self, user_id: str) -> list[PublicUser]:
        """Users that `user_id` follows, oldest edge first."""
        stmt = (
            select(User)
            .join(Relation, Relation.following_id == User.id)
            .where(Relation.follower_id == user_id)
            .order_by(Relation.created_at)
        )
        async with self._sessions() as session:
            rows = await session.execute(stmt)
            users = rows.scalars().all()
        return [PublicUser.model_validate(u) for u in users]

    async def get_followers(self, user_id: str) -> list[PublicUser]:
        """Users following `user_id`, oldest edge first."""
        stmt = (
            select(User)
            .join(Relation, Relation.follower_id == User.id)
            .where(Relation.following_id == user_id)
            .order_by(Relation.created_at)
        )
        async with self._sessions() as session:
            rows = await session.execute(stmt)
            users = rows.scalars().all()
        return [PublicUser.model_validate(u) for u in users]

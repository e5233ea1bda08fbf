"""
Content service: post creation, per-author listing and the timeline.

Timeline composition (strictly sequential, two round-trips):

  1. F = ids the caller follows        (relations.follower_id = caller)
  2. U = F ∪ {caller}
  3. posts WHERE author_id IN U ORDER BY created_at DESC

Posts sharing a timestamp come back in whatever order the store returns them.
"""
import logging

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from socialapi.errors import BadRequest, InternalError
from socialapi.models import Post, Relation
from socialapi.schemas import PostCreate, PublicUser
from socialapi.telemetry import POSTS_CREATED_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class PostsService:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def create_post(self, data: PostCreate, current_user: PublicUser) -> Post:
        with tracer.start_as_current_span("create_post") as span:
            if not data.text and not data.media_url:
                raise BadRequest("A post must have either text or a media URL.")

            post = Post(author_id=current_user.id, text=data.text, media_url=data.media_url)
            async with self._sessions() as session:
                session.add(post)
                try:
                    await session.commit()
                except SQLAlchemyError as exc:
                    logger.error("Post creation failed for %s: %s", current_user.id, exc)
                    raise InternalError("An error occurred while creating the post.") from exc

            span.set_attribute("post.id", post.id)
            span.set_attribute("post.author_id", post.author_id)
            POSTS_CREATED_TOTAL.inc()
            logger.info("Post created: %s by user %s", post.id, post.author_id)
            return post

    async def get_posts_for_user(self, user_id: str) -> list[Post]:
        stmt = (
            select(Post)
            .where(Post.author_id == user_id)
            .order_by(Post.created_at.desc())
        )
        async with self._sessions() as session:
            rows = await session.execute(stmt)
            return list(rows.scalars().all())

    async def get_timeline(self, current_user: PublicUser) -> list[Post]:
        with tracer.start_as_current_span("get_timeline") as span:
            async with self._sessions() as session:
                followed = await session.execute(
                    select(Relation.following_id).where(
                        Relation.follower_id == current_user.id
                    )
                )
                author_ids = [current_user.id, *followed.scalars().all()]
                span.set_attribute("timeline.authors", len(author_ids))

                rows = await session.execute(
                    select(Post)
                    .where(Post.author_id.in_(author_ids))
                    .order_by(Post.created_at.desc())
                )
                posts = list(rows.scalars().all())

            span.set_attribute("timeline.posts", len(posts))
            return posts

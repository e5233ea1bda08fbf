"""
Timeline endpoint — GET /timeline/

Posts by the caller and everyone the caller follows, newest first.
"""
import time

from fastapi import APIRouter, Depends

from socialapi.context import RequestContext, get_context, require_user
from socialapi.schemas import PostResponse
from socialapi.telemetry import TIMELINE_LATENCY

router = APIRouter()


@router.get("/", response_model=list[PostResponse])
async def get_timeline(ctx: RequestContext = Depends(get_context)):
    current_user = require_user(ctx, "You must be logged in to view your timeline")

    start_time = time.time()
    posts = await ctx.posts.get_timeline(current_user)
    TIMELINE_LATENCY.observe(time.time() - start_time)
    return posts

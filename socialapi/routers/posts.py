"""
Post endpoints:
  POST /posts/           — create a post (auth)
  GET  /posts/?user_id=  — posts by one author, newest first
"""
from fastapi import APIRouter, Depends, Query, status

from socialapi.context import RequestContext, get_context, require_user
from socialapi.schemas import PostCreate, PostResponse

router = APIRouter()


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, ctx: RequestContext = Depends(get_context)):
    current_user = require_user(ctx, "You must be logged in to create a post")
    return await ctx.posts.create_post(body, current_user)


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    user_id: str = Query(..., description="Author whose posts to list"),
    ctx: RequestContext = Depends(get_context),
):
    return await ctx.posts.get_posts_for_user(user_id)

"""
Social graph endpoints:
  POST /users/{id}/follow     — follow a user (auth)
  POST /users/{id}/unfollow   — unfollow a user (auth)
  GET  /users/{id}/following  — who the user follows
  GET  /users/{id}/followers  — who follows the user
"""
from fastapi import APIRouter, Depends

from socialapi.context import RequestContext, get_context, require_user
from socialapi.schemas import FollowResult, PublicUser

router = APIRouter()


@router.post("/{user_id}/follow", response_model=FollowResult)
async def follow_user(user_id: str, ctx: RequestContext = Depends(get_context)):
    current_user = require_user(ctx, "You must be logged in to follow users")
    await ctx.follows.follow(user_id, current_user)
    return FollowResult(success=True)


@router.post("/{user_id}/unfollow", response_model=FollowResult)
async def unfollow_user(user_id: str, ctx: RequestContext = Depends(get_context)):
    current_user = require_user(ctx, "You must be logged in to unfollow users")
    await ctx.follows.unfollow(user_id, current_user)
    return FollowResult(success=True)


@router.get("/{user_id}/following", response_model=list[PublicUser])
async def list_following(user_id: str, ctx: RequestContext = Depends(get_context)):
    return await ctx.follows.get_following(user_id)


@router.get("/{user_id}/followers", response_model=list[PublicUser])
async def list_followers(user_id: str, ctx: RequestContext = Depends(get_context)):
    return await ctx.follows.get_followers(user_id)

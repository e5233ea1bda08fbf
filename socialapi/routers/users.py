"""
Account endpoints:
  POST /users/register — create an account
  POST /users/login    — exchange email + password for a bearer token
  GET  /users/me       — the caller's own profile
"""
import logging

from fastapi import APIRouter, Depends, status

from socialapi.context import RequestContext, get_context, require_user
from socialapi.schemas import LoginRequest, PublicUser, Token, UserCreate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=PublicUser, status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, ctx: RequestContext = Depends(get_context)):
    logger.info("Registration attempt: %s", body.username)
    return await ctx.users.register(body)


@router.post("/login", response_model=Token)
async def login(body: LoginRequest, ctx: RequestContext = Depends(get_context)):
    return await ctx.users.authenticate(body.email, body.password)


@router.get("/me", response_model=PublicUser)
async def me(ctx: RequestContext = Depends(get_context)):
    return require_user(ctx, "You must be logged in to view your profile")

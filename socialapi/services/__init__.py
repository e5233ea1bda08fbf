from socialapi.services.follow import FollowService
from socialapi.services.posts import PostsService
from socialapi.services.users import UsersService

__all__ = ["FollowService", "PostsService", "UsersService"]

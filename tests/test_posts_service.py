import pytest

from socialapi.errors import BadRequest, InternalError
from socialapi.schemas import PostCreate
from socialapi.services.posts import PostsService


async def test_create_post_with_text(services, make_user):
    author = await make_user("postauthor")

    post = await services.posts.create_post(PostCreate(text="This is my first post!"), author)

    assert post.text == "This is my first post!"
    assert post.media_url is None
    assert post.author_id == author.id
    assert [p.id for p in await services.posts.get_posts_for_user(author.id)] == [post.id]


async def test_create_post_with_media_only(services, make_user):
    author = await make_user("postauthor")

    post = await services.posts.create_post(
        PostCreate(media_url="https://cdn.example.com/cat.png"), author
    )

    assert post.text is None
    assert post.media_url == "https://cdn.example.com/cat.png"


@pytest.mark.parametrize(
    "payload",
    [{"text": None, "media_url": None}, {"text": "", "media_url": ""}],
    ids=["null", "empty"],
)
async def test_post_requires_text_or_media(services, make_user, payload):
    author = await make_user("postauthor")

    with pytest.raises(BadRequest) as excinfo:
        await services.posts.create_post(PostCreate(**payload), author)

    assert excinfo.value.message == "A post must have either text or a media URL."
    assert await services.posts.get_posts_for_user(author.id) == []


async def test_posts_for_user_newest_first(services, make_user):
    author = await make_user("postauthor")
    other = await make_user("otheruser")

    await services.posts.create_post(PostCreate(text="Post 1"), author)
    await services.posts.create_post(PostCreate(text="Post 2"), author)
    await services.posts.create_post(PostCreate(text="Post 3"), other)

    posts = await services.posts.get_posts_for_user(author.id)

    assert [p.text for p in posts] == ["Post 2", "Post 1"]
    assert all(p.author_id == author.id for p in posts)


async def test_timeline_merges_self_and_followed(services, make_user):
    a = await make_user("user_a")
    b = await make_user("user_b")
    c = await make_user("user_c")
    d = await make_user("user_d")
    await services.follows.follow(b.id, a)
    await services.follows.follow(c.id, a)

    await services.posts.create_post(PostCreate(text="Post 1"), b)
    await services.posts.create_post(PostCreate(text="Post 2"), a)
    await services.posts.create_post(PostCreate(text="Post 3"), b)
    await services.posts.create_post(PostCreate(text="Post 4"), d)

    timeline = await services.posts.get_timeline(a)

    assert [p.text for p in timeline] == ["Post 3", "Post 2", "Post 1"]


async def test_timeline_of_lonely_user_is_own_posts(services, make_user):
    a = await make_user("user_a")
    b = await make_user("user_b")
    await services.posts.create_post(PostCreate(text="mine"), a)
    await services.posts.create_post(PostCreate(text="theirs"), b)

    assert [p.text for p in await services.posts.get_timeline(a)] == ["mine"]


async def test_timeline_drops_unfollowed_authors(services, make_user):
    a = await make_user("user_a")
    b = await make_user("user_b")
    await services.follows.follow(b.id, a)
    await services.posts.create_post(PostCreate(text="from b"), b)
    assert [p.text for p in await services.posts.get_timeline(a)] == ["from b"]

    await services.follows.unfollow(b.id, a)

    assert await services.posts.get_timeline(a) == []


async def test_post_by_unknown_author_is_internal_error(services, make_user):
    real = await make_user("postauthor")
    ghost = real.model_copy(update={"id": "no-such-user"})

    with pytest.raises(InternalError) as excinfo:
        await services.posts.create_post(PostCreate(text="hello"), ghost)

    assert excinfo.value.message == "An error occurred while creating the post."
    assert await services.posts.get_posts_for_user("no-such-user") == []


async def test_post_store_failure_is_internal_error(make_user, unreachable_store):
    author = await make_user("postauthor")

    with pytest.raises(InternalError) as excinfo:
        await PostsService(unreachable_store).create_post(PostCreate(text="hello"), author)

    assert excinfo.value.message == "An error occurred while creating the post."


async def test_created_at_reads_back_unchanged(services, make_user):
    author = await make_user("postauthor")
    post = await services.posts.create_post(PostCreate(text="stamped"), author)

    (stored,) = await services.posts.get_posts_for_user(author.id)

    assert stored.created_at.tzinfo is not None
    assert stored.created_at == post.created_at
    assert stored.updated_at == post.updated_at

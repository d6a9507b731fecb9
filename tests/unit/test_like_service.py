# tests/unit/test_like_service.py
"""
Unit Tests for LikeService
"""

import pytest

from src.domain.exceptions import ResourceNotFoundError
from src.infrastructure.repositories import UserRepository, VideoRepository


@pytest.mark.asyncio
async def test_like_then_unlike_video(services, db_session, alice, bob, make_video):
    video = await make_video(alice)

    liked = await services.likes.toggle_video_like(video.id, bob.id)
    assert liked.liked is True
    assert liked.like_count == 1

    unliked = await services.likes.toggle_video_like(video.id, bob.id)
    assert unliked.liked is False
    assert unliked.like_count == 0

    stored = await VideoRepository(db_session).get_by_id(video.id)
    assert stored.likes == []
    assert stored.like_count == 0


@pytest.mark.asyncio
async def test_like_count_tracks_set_size(services, db_session, alice, bob, make_user, make_video):
    carol = await make_user("carol")
    video = await make_video(alice)

    await services.likes.toggle_video_like(video.id, bob.id)
    await services.likes.toggle_video_like(video.id, carol.id)
    result = await services.likes.toggle_video_like(video.id, alice.id)

    stored = await VideoRepository(db_session).get_by_id(video.id)
    assert result.like_count == 3
    assert stored.like_count == len(stored.likes) == 3
    assert all("liked_at" in like for like in stored.likes)


@pytest.mark.asyncio
async def test_video_like_mirrors_liked_videos(services, db_session, alice, bob, make_video):
    video = await make_video(alice)
    users = UserRepository(db_session)

    await services.likes.toggle_video_like(video.id, bob.id)
    assert (await users.get_by_id(bob.id)).liked_videos == [video.id]

    await services.likes.toggle_video_like(video.id, bob.id)
    assert (await users.get_by_id(bob.id)).liked_videos == []


@pytest.mark.asyncio
async def test_like_missing_video(services, bob):
    with pytest.raises(ResourceNotFoundError) as exc:
        await services.likes.toggle_video_like("missing", bob.id)
    assert exc.value.resource_type == "Video"


@pytest.mark.asyncio
async def test_like_by_unknown_actor(services, alice, make_video):
    video = await make_video(alice)
    with pytest.raises(ResourceNotFoundError) as exc:
        await services.likes.toggle_video_like(video.id, "ghost")
    assert exc.value.resource_type == "User"


@pytest.mark.asyncio
async def test_comment_like_toggle(services, alice, bob, make_video):
    video = await make_video(alice)
    comment = await services.comments.create_comment(video.id, alice.id, "first!")

    first = await services.likes.toggle_comment_like(comment.id, bob.id)
    second = await services.likes.toggle_comment_like(comment.id, alice.id)
    third = await services.likes.toggle_comment_like(comment.id, bob.id)

    assert (first.liked, first.like_count) == (True, 1)
    assert (second.liked, second.like_count) == (True, 2)
    assert (third.liked, third.like_count) == (False, 1)


@pytest.mark.asyncio
async def test_like_missing_comment(services, bob):
    with pytest.raises(ResourceNotFoundError):
        await services.likes.toggle_comment_like("missing", bob.id)

"""
Pure engagement helpers.

Everything here works on plain values and always returns new lists, so the
ORM sees a fresh JSON value on assignment and counters can be derived from
the resulting set sizes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from src.app.models import Video, VideoStatus

# Legal processing transitions; completed and failed are terminal.
ALLOWED_TRANSITIONS: Dict[VideoStatus, Tuple[VideoStatus, ...]] = {
    VideoStatus.PENDING: (VideoStatus.PROCESSING, VideoStatus.FAILED),
    VideoStatus.PROCESSING: (VideoStatus.COMPLETED, VideoStatus.FAILED),
    VideoStatus.COMPLETED: (),
    VideoStatus.FAILED: (),
}


def toggle_stamped_member(
    entries: Optional[Iterable[Dict[str, Any]]],
    actor_id: str,
    now: datetime,
    key: str = "user",
    stamp_key: str = "liked_at",
) -> Tuple[List[Dict[str, Any]], bool]:
    """
    Flip `actor_id` in a set of {key: id, stamp_key: iso} entries.

    Returns:
        (new entries, True if the actor is a member afterwards)
    """
    current = list(entries or [])
    remaining = [entry for entry in current if entry.get(key) != actor_id]
    if len(remaining) != len(current):
        return remaining, False
    remaining.append({key: actor_id, stamp_key: now.isoformat()})
    return remaining, True


def with_member(ids: Optional[Iterable[str]], member: str) -> List[str]:
    current = list(ids or [])
    if member not in current:
        current.append(member)
    return current


def without_member(ids: Optional[Iterable[str]], member: str) -> List[str]:
    return [value for value in (ids or []) if value != member]


def set_membership(ids: Optional[Iterable[str]], member: str, present: bool) -> List[str]:
    """Idempotent add/remove, safe to re-apply on retry"""
    return with_member(ids, member) if present else without_member(ids, member)


def normalize_tags(raw: Union[str, Iterable[str], None]) -> List[str]:
    """
    Split on commas, trim, lowercase, drop empties and repeats.

    "a,b,b, a" -> ["a", "b"]
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)

    tags: List[str] = []
    for part in parts:
        tag = str(part).strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def can_transition(current: VideoStatus, target: VideoStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())


def is_visible_to(video: Video, viewer_id: Optional[str]) -> bool:
    """Owners always see their video; everyone else only completed public ones"""
    if viewer_id is not None and video.owner_id == viewer_id:
        return True
    return video.is_published

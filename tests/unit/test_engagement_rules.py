# tests/unit/test_engagement_rules.py
"""
Unit Tests for the pure engagement helpers and result records
"""

from datetime import datetime

import pytest

from src.app.models import Video, VideoStatus
from src.domain.engagement import (
    can_transition,
    is_visible_to,
    normalize_tags,
    set_membership,
    toggle_stamped_member,
    with_member,
    without_member,
)
from src.domain.models import Page, ReconciliationReport

NOW = datetime(2024, 1, 1, 12, 0, 0)


class TestToggle:
    def test_adds_missing_actor(self):
        entries, liked = toggle_stamped_member([], "u1", NOW)

        assert liked is True
        assert entries == [{"user": "u1", "liked_at": NOW.isoformat()}]

    def test_removes_present_actor(self):
        start = [{"user": "u1", "liked_at": "x"}, {"user": "u2", "liked_at": "y"}]
        entries, liked = toggle_stamped_member(start, "u1", NOW)

        assert liked is False
        assert entries == [{"user": "u2", "liked_at": "y"}]

    def test_twice_restores_original_set(self):
        start = [{"user": "u2", "liked_at": "y"}]
        once, _ = toggle_stamped_member(start, "u1", NOW)
        twice, liked = toggle_stamped_member(once, "u1", NOW)

        assert liked is False
        assert twice == start

    def test_never_mutates_input(self):
        start = [{"user": "u1", "liked_at": "x"}]
        toggle_stamped_member(start, "u2", NOW)
        assert start == [{"user": "u1", "liked_at": "x"}]

    def test_handles_none(self):
        entries, liked = toggle_stamped_member(None, "u1", NOW)
        assert liked and len(entries) == 1


class TestMembership:
    def test_with_member_is_idempotent(self):
        assert with_member(["a"], "a") == ["a"]
        assert with_member(["a"], "b") == ["a", "b"]

    def test_without_member(self):
        assert without_member(["a", "b"], "a") == ["b"]
        assert without_member(None, "a") == []

    def test_set_membership(self):
        assert set_membership([], "a", True) == ["a"]
        assert set_membership(["a"], "a", False) == []


class TestTags:
    def test_scenario_normalization(self):
        assert normalize_tags("a,b,b, a") == ["a", "b"]

    def test_case_and_whitespace(self):
        assert normalize_tags("  Music , LIVE,, ") == ["music", "live"]

    def test_list_input(self):
        assert normalize_tags([" Rock", "rock", "Jazz "]) == ["rock", "jazz"]

    def test_empty(self):
        assert normalize_tags(None) == []
        assert normalize_tags("") == []


class TestStateMachine:
    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (VideoStatus.PENDING, VideoStatus.PROCESSING, True),
            (VideoStatus.PENDING, VideoStatus.FAILED, True),
            (VideoStatus.PROCESSING, VideoStatus.COMPLETED, True),
            (VideoStatus.PROCESSING, VideoStatus.FAILED, True),
            (VideoStatus.PENDING, VideoStatus.COMPLETED, False),
            (VideoStatus.COMPLETED, VideoStatus.PROCESSING, False),
            (VideoStatus.COMPLETED, VideoStatus.FAILED, False),
            (VideoStatus.FAILED, VideoStatus.COMPLETED, False),
        ],
    )
    def test_transitions(self, current, target, allowed):
        assert can_transition(current, target) is allowed


class TestVisibility:
    def _video(self, status, is_public):
        return Video(owner_id="owner", status=status, is_public=is_public)

    def test_completed_public_visible_to_all(self):
        video = self._video(VideoStatus.COMPLETED, True)
        assert is_visible_to(video, None)
        assert is_visible_to(video, "someone")

    def test_private_visible_to_owner_only(self):
        video = self._video(VideoStatus.COMPLETED, False)
        assert is_visible_to(video, "owner")
        assert not is_visible_to(video, "someone")
        assert not is_visible_to(video, None)

    def test_processing_hidden_even_if_public(self):
        video = self._video(VideoStatus.PROCESSING, True)
        assert not is_visible_to(video, "someone")
        assert is_visible_to(video, "owner")


class TestRecords:
    def test_page_math(self):
        page = Page.build(items=[1, 2], total_count=5, page=2, page_size=2)

        assert page.total_pages == 3
        assert page.has_next_page is True
        assert page.has_prev_page is True

    def test_last_page(self):
        page = Page.build(items=[5], total_count=5, page=3, page_size=2)
        assert page.has_next_page is False

    def test_empty_page(self):
        page = Page.build(items=[], total_count=0, page=1, page_size=20)

        assert page.total_pages == 0
        assert page.has_next_page is False
        assert page.has_prev_page is False
        assert page.to_dict()["total_count"] == 0

    def test_report_merge(self):
        report = ReconciliationReport()
        report.merge(ReconciliationReport(users_scanned=1, edges_repaired=2))
        report.merge(ReconciliationReport(users_scanned=1, counts_repaired=1))

        assert (report.users_scanned, report.edges_repaired, report.counts_repaired) == (
            2,
            2,
            1,
        )

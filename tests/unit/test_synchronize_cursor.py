"""Unit tests for the cursor evaluation that selects new releases."""

from datetime import datetime, timezone

from gitspot_sync.synchronize.cursor import evaluate_cursor, is_newer_than_watermark
from gitspot_sync.synchronize.models import Watermark


def at(day: int, hour: int = 0) -> datetime:
    return datetime(2024, 1, day, hour, tzinfo=timezone.utc)


class TestEvaluateCursor:
    """Tests for evaluate_cursor."""

    def test_empty_watermark_returns_all_publishable_ascending(self, make_release) -> None:
        """Without a watermark every publishable release is new, oldest first."""
        releases = [
            make_release(3, at(3)),
            make_release(2, at(2)),
            make_release(1, at(1)),
        ]
        evaluation = evaluate_cursor(Watermark(), releases)
        assert [release.id for release in evaluation.new_releases] == [1, 2, 3]
        assert evaluation.next_watermark == Watermark(last_release_id=3, last_release_tag_name="v3", last_release_published_at=at(3))
        assert evaluation.is_skipped is False

    def test_timestamp_watermark_selects_strictly_newer(self, make_release) -> None:
        """Only releases published after the watermark timestamp are new."""
        watermark = Watermark(last_release_id=2, last_release_tag_name="v2", last_release_published_at=at(2))
        releases = [make_release(3, at(3)), make_release(2, at(2)), make_release(1, at(1))]
        evaluation = evaluate_cursor(watermark, releases)
        assert [release.id for release in evaluation.new_releases] == [3]
        assert evaluation.next_watermark is not None
        assert evaluation.next_watermark.last_release_id == 3

    def test_equal_timestamp_is_not_new(self, make_release) -> None:
        """A release published at exactly the watermark time is not new."""
        watermark = Watermark(last_release_id=2, last_release_published_at=at(2))
        evaluation = evaluate_cursor(watermark, [make_release(5, at(2))])
        assert evaluation.is_skipped is True
        assert evaluation.next_watermark is None

    def test_timestamp_takes_precedence_over_id(self, make_release) -> None:
        """A higher ID published before the watermark timestamp is not new."""
        watermark = Watermark(last_release_id=10, last_release_published_at=at(5))
        releases = [make_release(20, at(4)), make_release(5, at(6))]
        evaluation = evaluate_cursor(watermark, releases)
        assert [release.id for release in evaluation.new_releases] == [5]

    def test_id_fallback_when_no_timestamp_recorded(self, make_release) -> None:
        """Without a recorded timestamp, releases with a higher ID are new."""
        watermark = Watermark(last_release_id=2)
        releases = [make_release(1, at(1)), make_release(2, at(2)), make_release(3, at(3))]
        evaluation = evaluate_cursor(watermark, releases)
        assert [release.id for release in evaluation.new_releases] == [3]

    def test_all_drafts_is_skipped(self, make_release) -> None:
        """Drafts are never publishable."""
        releases = [make_release(1, at(1), draft=True), make_release(2, at(2), draft=True)]
        evaluation = evaluate_cursor(Watermark(), releases)
        assert evaluation.is_skipped is True
        assert evaluation.next_watermark is None

    def test_unpublished_releases_are_ignored(self, make_release) -> None:
        """Releases without a publish time are not publishable."""
        releases = [make_release(1, None), make_release(2, at(2))]
        evaluation = evaluate_cursor(Watermark(), releases)
        assert [release.id for release in evaluation.new_releases] == [2]

    def test_no_releases_is_skipped(self) -> None:
        """An empty release list yields nothing to publish."""
        evaluation = evaluate_cursor(Watermark(), [])
        assert evaluation.new_releases == []
        assert evaluation.next_watermark is None

    def test_nothing_newer_is_skipped(self, make_release) -> None:
        """When every release is at or before the watermark the mapping is skipped."""
        watermark = Watermark(last_release_id=3, last_release_published_at=at(3))
        releases = [make_release(3, at(3)), make_release(2, at(2))]
        assert evaluate_cursor(watermark, releases).is_skipped is True

    def test_ties_keep_input_order(self, make_release) -> None:
        """Releases sharing a publish time keep the order they were fetched in."""
        releases = [make_release(7, at(2)), make_release(4, at(2)), make_release(1, at(1))]
        evaluation = evaluate_cursor(Watermark(), releases)
        assert [release.id for release in evaluation.new_releases] == [1, 7, 4]
        assert evaluation.next_watermark is not None
        assert evaluation.next_watermark.last_release_id == 4

    def test_missing_tag_keeps_previous_tag(self, make_release) -> None:
        """The next watermark keeps the previous tag when the newest release has none."""
        watermark = Watermark(last_release_id=1, last_release_tag_name="v1.0.0", last_release_published_at=at(1))
        release = make_release(2, at(2), tag_name="")
        evaluation = evaluate_cursor(watermark, [release])
        assert evaluation.next_watermark is not None
        assert evaluation.next_watermark.last_release_tag_name == "v1.0.0"
        assert evaluation.next_watermark.last_release_id == 2

    def test_naive_timestamps_are_treated_as_utc(self, make_release) -> None:
        """Naive watermark timestamps compare as UTC."""
        watermark = Watermark(last_release_published_at=datetime(2024, 1, 2))
        evaluation = evaluate_cursor(watermark, [make_release(1, at(1)), make_release(3, at(3))])
        assert [release.id for release in evaluation.new_releases] == [3]


class TestIsNewerThanWatermark:
    """Tests for is_newer_than_watermark."""

    def test_empty_watermark(self, make_release) -> None:
        assert is_newer_than_watermark(make_release(1, at(1)), Watermark()) is True

    def test_release_without_timestamp_against_timestamp_watermark(self, make_release) -> None:
        assert is_newer_than_watermark(make_release(9, None), Watermark(last_release_published_at=at(1))) is False

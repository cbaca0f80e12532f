"""Unit tests for rendering release note bodies."""

from datetime import datetime, timezone

import pytest

from gitspot_sync.synchronize.models import ReleaseRecord, RepositoryIdentity
from gitspot_sync.synchronize.notes import ReleaseNoteFormatter, format_release_note


@pytest.fixture
def repository() -> RepositoryIdentity:
    """A repository with a URL."""
    return RepositoryIdentity(owner="acme", name="widgets", full_name="acme/widgets", html_url="https://github.com/acme/widgets")


@pytest.fixture
def formatter() -> ReleaseNoteFormatter:
    """The default formatter."""
    return ReleaseNoteFormatter()


def test_full_release_renders_every_section(formatter: ReleaseNoteFormatter, repository: RepositoryIdentity) -> None:
    """A release with every field renders repo, release, publish time and notes."""
    release = ReleaseRecord(
        id=1,
        tag_name="v1.2.0",
        name="Spring release",
        html_url="https://github.com/acme/widgets/releases/tag/v1.2.0",
        body="  Fixed things.  ",
        published_at=datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
    )
    note = formatter.format(repository, release)

    assert note.startswith("<p><strong>GitHub Release</strong></p>")
    assert '<p><strong>Repo:</strong> <a href="https://github.com/acme/widgets">acme/widgets</a></p>' in note
    assert '<a href="https://github.com/acme/widgets/releases/tag/v1.2.0">v1.2.0</a> - Spring release</p>' in note
    assert "<p><strong>Published:</strong> 2024-03-01T12:30:00Z</p>" in note
    assert "<p><strong>Notes:</strong></p>" in note
    assert "<pre>Fixed things.</pre>" in note


def test_absent_fields_are_omitted(formatter: ReleaseNoteFormatter) -> None:
    """Missing name, body, URLs and publish time leave no trace in the note."""
    repository = RepositoryIdentity(full_name="acme/widgets")
    note = formatter.format(repository, ReleaseRecord(id=1, tag_name="v1"))

    assert "<p><strong>Repo:</strong> acme/widgets</p>" in note
    assert "<p><strong>Release:</strong> v1</p>" in note
    assert "<a " not in note
    assert "Published" not in note
    assert "Notes" not in note
    assert " - " not in note


def test_missing_tag_renders_unknown(formatter: ReleaseNoteFormatter, repository: RepositoryIdentity) -> None:
    """A release without a tag is labelled unknown."""
    note = formatter.format(repository, ReleaseRecord(id=1))
    assert "<p><strong>Release:</strong> unknown</p>" in note


def test_whitespace_only_body_is_omitted(formatter: ReleaseNoteFormatter, repository: RepositoryIdentity) -> None:
    """A body that is empty after stripping is treated as absent."""
    note = formatter.format(repository, ReleaseRecord(id=1, tag_name="v1", body="   \n\t "))
    assert "<pre>" not in note


def test_html_metacharacters_are_escaped(formatter: ReleaseNoteFormatter) -> None:
    """Text from GitHub cannot inject markup into the note."""
    repository = RepositoryIdentity(full_name="acme/<widgets>", html_url='https://example.com/"x"')
    release = ReleaseRecord(id=1, tag_name="v1&2", name="It's <b>bold</b>", body='<script>alert("x")</script>')
    note = formatter.format(repository, release)

    assert "<script>" not in note
    assert "<b>" not in note
    assert "acme/&lt;widgets&gt;" in note
    assert "v1&amp;2" in note
    assert "It&#39;s &lt;b&gt;bold&lt;/b&gt;" in note
    assert "&lt;script&gt;alert(&#34;x&#34;)&lt;/script&gt;" in note
    assert 'href="https://example.com/&#34;x&#34;"' in note


def test_long_body_is_truncated(repository: RepositoryIdentity) -> None:
    """Bodies longer than the limit are cut with a trailing marker."""
    formatter = ReleaseNoteFormatter(max_body_length=20)
    note = formatter.format(repository, ReleaseRecord(id=1, tag_name="v1", body="x" * 50))
    assert f"<pre>{'x' * 17}...</pre>" in note


def test_default_limit_is_8000_characters(formatter: ReleaseNoteFormatter, repository: RepositoryIdentity) -> None:
    """The default limit keeps 7997 characters of body plus the marker."""
    note = formatter.format(repository, ReleaseRecord(id=1, tag_name="v1", body="y" * 9000))
    assert f"<pre>{'y' * 7997}...</pre>" in note


def test_body_at_limit_is_not_truncated(formatter: ReleaseNoteFormatter, repository: RepositoryIdentity) -> None:
    note = formatter.format(repository, ReleaseRecord(id=1, tag_name="v1", body="z" * 8000))
    assert f"<pre>{'z' * 8000}</pre>" in note


def test_output_is_deterministic(repository: RepositoryIdentity) -> None:
    """The same input always renders the same note."""
    release = ReleaseRecord(id=1, tag_name="v1", name="One", body="Body", published_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert format_release_note(repository, release) == format_release_note(repository, release)
    assert format_release_note(repository, release) == ReleaseNoteFormatter().format(repository, release)

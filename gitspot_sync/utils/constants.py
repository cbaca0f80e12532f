"""Shared constants used across the application."""

# Release Fetching Constants
# --------------------------

DEFAULT_RELEASE_FETCH_LIMIT = 10
"""Number of most recent releases fetched per repository on each run."""

MAX_RELEASES_PER_PAGE = 100
"""GitHub's maximum page size for the list releases endpoint."""

REPOSITORIES_PER_PAGE = 100
"""Page size used when paging through the repository catalog."""

# Note Formatting Constants
# -------------------------

RELEASE_NOTE_TEMPLATE_NAME = "release_note.html.j2"
"""Jinja2 template, relative to the templates directory, used to render release notes."""

MAX_RELEASE_BODY_LENGTH = 8000
"""Maximum number of characters of release body text copied into a note."""

TRUNCATION_SUFFIX = "..."
"""Marker appended to release body text that was truncated."""

UNKNOWN_RELEASE_TAG = "unknown"
"""Label rendered in place of a missing release tag."""

# HubSpot Publishing Constants
# ----------------------------

NOTE_TO_COMPANY_ASSOCIATION_TYPE_ID = 190
"""HubSpot-defined association type linking a note to a company."""

DEFAULT_PUBLISH_DELAY_SECONDS = 0.2
"""Pause between consecutive note creations to stay clear of HubSpot throttling."""

# Scheduler Constants
# -------------------

TRUSTED_SCHEDULER_HEADER = "x-vercel-cron"
"""Header set by the hosting platform's scheduler on cron invocations."""

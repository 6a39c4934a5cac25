"""Companion exceptions.

Only submission validation lives here; reply-client failures are part of the
client contract (see clients/base.py). Clicks while the companion is leaving
or gone are defined no-ops and never raise.
"""


class SubmissionRejected(ValueError):
    """Raised when a message with empty or whitespace-only text is appended."""

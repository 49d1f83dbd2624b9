from __future__ import annotations


class MediacheckError(Exception):
    code = "INTERNAL_SERVER_ERROR"


class NotFound(MediacheckError):
    code = "NOT_FOUND"


class Unauthorized(MediacheckError):
    code = "UNAUTHORIZED"


class PersistenceFailure(MediacheckError):
    """The response store could not read or write a record."""

    code = "PERSISTENCE_FAILURE"


class UpstreamFailure(MediacheckError):
    """The completion API failed.

    Never escapes the AI reply coordinator; it is recorded on the AI response
    as its ERROR text instead.
    """

    code = "UPSTREAM_FAILURE"


class AIReplyWaitTimeout(MediacheckError):
    code = "AI_REPLY_WAIT_TIMEOUT"

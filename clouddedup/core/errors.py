from __future__ import annotations


class CloudDedupError(RuntimeError):
    pass


class InvalidArgument(CloudDedupError):
    """Malformed request input, rejected before any backend I/O."""


class UnsupportedMethod(InvalidArgument):
    pass


class BackendUnavailable(CloudDedupError):
    """Backend is unconfigured or unreachable; fails the whole operation."""


class NotFound(CloudDedupError):
    pass


class ContentUnavailable(CloudDedupError):
    """Content of a single file could not be fetched."""


class DecodeError(CloudDedupError):
    pass


class UnsupportedFormat(DecodeError):
    pass


class DeletionPolicyError(CloudDedupError):
    pass

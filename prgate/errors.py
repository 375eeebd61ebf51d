"""Fatal conditions that abort a gate run before any side effect."""


class GateError(Exception):
    """Base class for fatal gate errors."""


class PreconditionError(GateError):
    """Upstream analysis run is missing or did not succeed."""


class DataIntegrityError(GateError):
    """Input that must exist is missing (empty diff, no PR number)."""

"""
Error taxonomy.

Everything except UnknownUniversityError is soft: raised inside a helper,
caught at the nearest boundary, logged, and replaced by a neutral default.
"""


class AnalyticsError(Exception):
    """Base class for analytics errors."""


class MissingDataError(AnalyticsError):
    """A collection came back empty or a record lacks required fields."""


class AliasLoadFailure(AnalyticsError):
    """The university alias table could not be retrieved or parsed."""


class MalformedTimestamp(AnalyticsError):
    """A timestamp field is present but cannot be parsed."""


class InvariantViolation(AnalyticsError):
    """An aggregate broke an invariant (negative count, stage above its root)."""


class UnknownUniversityError(AnalyticsError, ValueError):
    """A report was requested for a university key that is not configured."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Universidad no válida: {key}")

"""
Error taxonomy for FormAssist.

Every failure raised inside the pipeline derives from FormAssistError.
QueryPipeline catches these at each stage boundary and returns them as data.
"""


class FormAssistError(Exception):
    """
    Base class for pipeline errors.

    Attributes:
        message: Human-readable description, rendered verbatim to users.
        table_name: Offending table, when the failure is tied to one.
    """

    def __init__(self, message: str, *, table_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.table_name = table_name

    @property
    def error_type(self) -> str:
        return type(self).__name__

    def with_table(self, table_name: str) -> "FormAssistError":
        """Tag the error with the table being processed, keeping an existing tag."""
        if self.table_name is None:
            self.table_name = table_name
        return self

    def __str__(self) -> str:
        return self.message


class ValidationError(FormAssistError):
    """Caller input is unusable (empty question, malformed table references)."""


class AuthError(FormAssistError):
    """No usable bearer token for the table API."""


class NotFoundError(FormAssistError):
    """A declared table name matches no listed table."""


class NetworkError(FormAssistError):
    """Transport failure or non-2xx response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        table_name: str | None = None,
    ):
        super().__init__(message, table_name=table_name)
        self.status_code = status_code


class ParseError(FormAssistError):
    """Response body is not well-formed or lacks an expected field."""


class UpstreamError(FormAssistError):
    """The completion endpoint returned a structured error."""


class ConfigError(FormAssistError):
    """Missing or invalid configuration, such as an empty API key."""


class BuildContextError(FormAssistError):
    """Prompts cannot be built from the assembled context."""


__all__ = [
    "FormAssistError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "NetworkError",
    "ParseError",
    "UpstreamError",
    "ConfigError",
    "BuildContextError",
]

"""
Authentication session for the table API.
"""

import inspect
from typing import Any, Awaitable, Callable, Union

from pydantic import Field, field_validator

from formassist.errors import AuthError

from .base import BaseModel

TokenProvider = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]

API_PREFIX = "/api/v1"


class AuthSession(BaseModel):
    """
    Credentials for one pipeline call. Never persisted.

    Attributes:
        base_url: Host base URL, e.g. ``https://tenant.example.com``.
        token: Bearer token, when the caller already has one.
        token_provider: Fallback callable (sync or async) returning a token.
    """

    base_url: str
    token: str | None = Field(default=None, repr=False)
    token_provider: Any = Field(default=None, exclude=True, repr=False)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("token_provider")
    @classmethod
    def check_provider(cls, v: Any) -> Any:
        if v is not None and not callable(v):
            raise ValueError("token_provider must be callable")
        return v

    def api_url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}/{path.lstrip('/')}"

    async def resolve_token(self) -> str:
        """
        Resolve the bearer token.

        Order: the embedded token, then the token provider.

        Raises:
            AuthError: If neither yields a non-empty token.
        """
        if self.token and self.token.strip():
            return self.token.strip()

        provider: TokenProvider | None = self.token_provider
        if provider is not None:
            value = provider()
            if inspect.isawaitable(value):
                value = await value
            if value and str(value).strip():
                return str(value).strip()

        raise AuthError("No usable bearer token: session has no token and the token provider returned none")

    async def authenticated(self) -> "AuthSession":
        """Return a copy with the token resolved, so later calls skip the provider."""
        token = await self.resolve_token()
        return self.model_copy(update={"token": token})

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .apidef import AD_TOKEN_KEY, JWT_KEY, PRO_TOKEN_KEY

__all__ = [
    "FLAT_OBJECT",
    "TokenResponse",
    "SubscriptionRequest",
    "SubscriptionResponse",
]

# Every payload on the wire is a flat JSON object of strings.
FLAT_OBJECT: TypeAdapter[dict[str, str]] = TypeAdapter(dict[str, str])


class _Envelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_json(self) -> str:
        """Serialize with the wire keys."""
        return self.model_dump_json(by_alias=True)


class TokenResponse(_Envelope):
    """Response body of GET /v1/token."""
    token: str = Field(alias=AD_TOKEN_KEY)


class SubscriptionRequest(_Envelope):
    """Request body of POST /v1/subscription."""
    user_jwt: str = Field(alias=JWT_KEY)


class SubscriptionResponse(_Envelope):
    """Response body of POST /v1/subscription."""
    token: str = Field(alias=PRO_TOKEN_KEY)

"""
Auth-specific Pydantic schemas.
"""

from pydantic import BaseModel, Field


class User(BaseModel):
    """Identity resolved from a verified access token."""

    id: str = Field(..., description="User's unique identifier (JWT sub)")
    email: str | None = Field(None, description="User's email address")
    role: str | None = Field(None, description="Role claim from the token")


class Caller(BaseModel):
    """Whoever sent the request: always a token, sometimes a known user."""

    access_token: str = Field(..., description="Raw bearer token")
    user: User | None = Field(None, description="Resolved identity, if verifiable")

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

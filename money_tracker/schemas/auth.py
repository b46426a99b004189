"""Auth schemas (credentials, token)"""
from pydantic import BaseModel, Field, field_validator


class Credentials(BaseModel):
    """Login and registration request schema"""
    username: str = Field(..., min_length=3, max_length=50, pattern="^[a-zA-Z0-9_-]+$")
    password: str = Field(..., min_length=1)

    @field_validator("username", "password", mode="before")
    @classmethod
    def strip_value(cls, v):
        """Trim surrounding whitespace"""
        if isinstance(v, str):
            return v.strip()
        return v


class Token(BaseModel):
    """Login response schema"""
    token: str = Field(..., min_length=1)

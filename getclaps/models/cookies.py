"""Cookie models shared by every cookie store layer."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class SameSite(str, Enum):
    """SameSite attribute values."""
    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


class Cookie(BaseModel):
    """
    A single cookie and its attributes.

    Stores return cookies with only `name` and `value` populated; the other
    attributes are used when writing.
    """
    name: str = Field(..., description="Cookie name")
    value: str = Field("", description="Cookie value")
    domain: Optional[str] = Field(None, description="Domain attribute, without a leading dot")
    path: str = Field("/", description="Path attribute")
    expires: Optional[datetime] = Field(None, description="Expiry; past dates delete the cookie")
    secure: bool = Field(False, description="Force the Secure attribute")
    http_only: bool = Field(False, description="HttpOnly attribute")
    same_site: Optional[SameSite] = Field(None, description="SameSite attribute")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "did",
                "value": "0c6e8a4e-5f64-4c39-9a3f-2f8f4f7d6a11",
                "path": "/",
                "http_only": True,
                "same_site": "Lax"
            }
        }

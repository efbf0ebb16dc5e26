"""Clap submission and count models."""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional


class ClapsRequest(BaseModel):
    """
    Body of a clap submission.

    Fields are loosely typed on purpose: the proof-of-clap input check
    rejects malformed values with a 400 before any hashing.
    """
    claps: Any = Field(..., description="Claimed number of claps")
    id: Any = Field(..., description="Clapper id, canonical UUID string")
    nonce: Any = Field(..., description="Proof-of-clap nonce solved by the client")

    class Config:
        json_schema_extra = {
            "example": {
                "claps": 3,
                "id": "3b9ac3f1-1d8b-4c47-a8c5-7f5fd86a2b01",
                "nonce": 1834
            }
        }


class ClapCount(BaseModel):
    """Clap totals for a single page."""
    claps: int = Field(0, description="Total claps")
    clappers: int = Field(0, description="Distinct clappers")


class ClapsResponse(BaseModel):
    """Clap totals keyed by canonical page URL."""
    counts: Dict[str, ClapCount] = Field(default_factory=dict)


class ClapRecord(BaseModel):
    """What gets handed to the analytics backend for one accepted submission."""
    hostname: str
    href: str
    hash: str = ""
    id: str
    visitor: Optional[str] = None
    claps: int
    nonce: int
    country: Optional[str] = None


class UpdateOptions(BaseModel):
    ip: Optional[str] = None
    dnt: bool = False
    origin_hostname: Optional[str] = None

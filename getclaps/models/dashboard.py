"""Dashboard session models."""
from pydantic import BaseModel, Field
from typing import List, Optional


class LoginRequest(BaseModel):
    """Dashboard login body."""
    id: str = Field(..., description="Dashboard key (UUID)")
    hostname: Optional[str] = Field(None, description="Hostname to remember for this dashboard")


class SessionInfo(BaseModel):
    """The current dashboard session as read back from cookies."""
    id: Optional[str] = Field(None, description="Active dashboard id")
    ids: List[str] = Field(default_factory=list, description="All dashboards signed in on this browser")


class Dashboard(BaseModel):
    id: str
    hostname: Optional[str] = None
    active: bool = True
    ip: Optional[str] = None
    dnt: bool = False

"""Pydantic models for the authenticated caller."""

from __future__ import annotations

from pydantic import BaseModel


class Session(BaseModel):
    """Verified identity of the caller, passed explicitly into every operation."""

    user_id: str
    email: str
    role: str = "agent"
    is_admin: bool = False

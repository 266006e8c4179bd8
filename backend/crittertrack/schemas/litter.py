"""Litter request/response bodies."""

from datetime import date
from typing import List, Optional

from pydantic import Field

from crittertrack.schemas.common import CamelModel


class LitterCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=1024)
    birth_date: date = Field(description="Date of the litter (YYYY-MM-DD)")
    count: int = Field(default=0, ge=0)
    # Animal ids; advisory, not checked against existing animals
    parent_ids: List[str] = Field(default_factory=list)


class LitterUpdateRequest(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=1024)
    birth_date: Optional[date] = None
    count: Optional[int] = Field(default=None, ge=0)
    parent_ids: Optional[List[str]] = None


class LitterResponse(CamelModel):
    id: str
    user_id: str
    name: str
    birth_date: date
    count: int
    parent_ids: List[str]
    sequential_id: int

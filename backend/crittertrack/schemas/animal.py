"""
CritterTrack Backend — Animal Schemas
=====================================

AnimalCreateRequest   POST /api/animals       (species required)
AnimalUpdateRequest   PUT  /api/animals/{id}  (every field optional)
AnimalResponse        full record, owner view and redacted public view
AnimalSummary         list rows, owner list and public list
"""

from datetime import date
from typing import Optional

from pydantic import Field, field_validator

from crittertrack.schemas.common import CamelModel


class AnimalFields(CamelModel):
    name: Optional[str] = Field(default=None, max_length=1024)
    breeder: Optional[str] = Field(default=None, max_length=1024)
    birth_date: Optional[date] = Field(default=None, description="ISO 8601 date (YYYY-MM-DD)")
    gender: Optional[str] = Field(default=None, max_length=16)
    color_variety: Optional[str] = Field(default=None, max_length=1024)
    coat_variety: Optional[str] = Field(default=None, max_length=1024)
    registry_code: Optional[str] = Field(default=None, max_length=1024)
    owner: Optional[str] = Field(default=None, max_length=1024)
    remarks: Optional[str] = Field(default=None, max_length=2048)
    genetics_code: Optional[str] = Field(default=None, max_length=1024)
    father_id: Optional[str] = Field(default=None, max_length=128)
    mother_id: Optional[str] = Field(default=None, max_length=128)


class AnimalCreateRequest(AnimalFields):
    species: str = Field(min_length=1, max_length=1024)
    show_on_profile: bool = False
    show_registry_code: bool = False
    show_owner: bool = False
    show_remarks: bool = False
    show_parents: bool = False

    @field_validator("species")
    @classmethod
    def species_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("species must not be blank")
        return v.strip()


class AnimalUpdateRequest(AnimalFields):
    species: Optional[str] = Field(default=None, min_length=1, max_length=1024)
    show_on_profile: Optional[bool] = None
    show_registry_code: Optional[bool] = None
    show_owner: Optional[bool] = None
    show_remarks: Optional[bool] = None
    show_parents: Optional[bool] = None

    @field_validator("species")
    @classmethod
    def species_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("species must not be blank")
        return v.strip() if v is not None else v


class AnimalResponse(AnimalFields):
    id: str
    user_id: str
    species: str
    show_on_profile: bool
    show_registry_code: bool
    show_owner: bool
    show_remarks: bool
    show_parents: bool
    sequential_id: int


class AnimalSummary(CamelModel):
    id: str
    user_id: str
    name: Optional[str] = None
    species: str
    show_on_profile: bool

"""Team identity models."""

from __future__ import annotations

from typing import NewType

from pydantic import BaseModel, Field

TeamId = NewType("TeamId", int)
"""Opaque team identifier. Comparable and hashable; its value carries no rank."""


class Team(BaseModel):
    """A national team as delivered by the storage layer."""

    model_config = {"frozen": True}

    id: int = Field(ge=0)
    name: str
    fifa_code: str = Field(min_length=3, max_length=3)
    iso2: str = Field(min_length=2, max_length=2)
    rank: int = Field(ge=1)

    @property
    def team_id(self) -> TeamId:
        return TeamId(self.id)

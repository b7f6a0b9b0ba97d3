"""
Pydantic schemas for KOL endpoints.

Create takes a full record (`KolCreate`). Update takes a sparse field map
(`KolUpdate`); its keys are checked one by one against the field rules
while the update directive is built, so the first bad field is the one
reported.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, RootModel

from .validation import Amount, DecimalDigits, Digits, Text, TextList, Uri


class KolCreate(BaseModel):
    """A full KOL record as sent by the client, without an ID."""
    model_config = ConfigDict(extra="forbid")

    name: Text = Field(alias="Name")
    platform: Text = Field(alias="Platform")
    sex: Text = Field(alias="Sex")
    categories: TextList = Field(alias="Categories")
    tel: Digits = Field(alias="Tel")
    link: Uri = Field(alias="Link")
    followers: Digits = Field(alias="Followers")
    photo_cost: Amount = Field(alias="Photo Cost / Kols")
    video_cost: Amount = Field(alias="VDO Cost / Kols")
    engagement_rate: DecimalDigits = Field(alias="ER%")


class KolUpdate(RootModel[Dict[str, Any]]):
    """Sparse update body: wire name -> new value."""


class KolRecord(BaseModel):
    """One stored KOL, serialized with its wire names."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="ID")
    name: str = Field(alias="Name")
    platform: str = Field(alias="Platform")
    sex: str = Field(alias="Sex")
    categories: list[str] = Field(alias="Categories")
    tel: str = Field(alias="Tel")
    link: str = Field(alias="Link")
    followers: str = Field(alias="Followers")
    photo_cost: float = Field(alias="Photo Cost / Kols")
    video_cost: float = Field(alias="VDO Cost / Kols")
    engagement_rate: str = Field(alias="ER%")

# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for ciplan."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict


class CiplanBaseModel(BaseModel):
    """Base model with shared config for ciplan values.

    Values are created once per pipeline run and never mutated afterward.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

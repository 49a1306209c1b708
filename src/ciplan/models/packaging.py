# Copyright (c) Syntropy Systems
"""Pydantic models for package planning."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import CiplanBaseModel


class PackageType(str, Enum):
    """Release package formats."""

    MSI = "msi"
    NUPKG = "nupkg"
    ZIP = "zip"
    TAR = "tar"
    TAR_ARM = "tar-arm"


class PackagePlan(CiplanBaseModel):
    """What the packaging stage should build and whether to publish it."""

    types: frozenset[PackageType] = Field(default_factory=frozenset)
    release_tag: str
    platform_runtimes: frozenset[str] = Field(default_factory=frozenset)
    publish: bool = False

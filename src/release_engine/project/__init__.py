"""Ecosystem manifests and their discovery."""

from __future__ import annotations

from release_engine.project.ecosystems import (
    CARGO,
    ECOSYSTEMS,
    PYTHON,
    Ecosystem,
    get_ecosystem,
    pin_requirement,
)
from release_engine.project.manifest import ManifestTarget, locate_manifests

__all__ = [
    "CARGO",
    "ECOSYSTEMS",
    "PYTHON",
    "Ecosystem",
    "ManifestTarget",
    "get_ecosystem",
    "locate_manifests",
    "pin_requirement",
]

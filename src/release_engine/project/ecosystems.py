"""Ecosystem policies.

An ``Ecosystem`` bundles everything the engine needs to know about one
packaging ecosystem: the manifest filename, how to read the package name and
workspace members, how to rewrite versions, and the initial version of a
first release. New ecosystems are new ``Ecosystem`` values, not subclasses.

Manifests are TOML documents handled through tomlkit so that rewriting a
version leaves the rest of the file byte-for-byte intact.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import tomlkit
from packaging.requirements import Requirement
from packaging.utils import canonicalize_name
from tomlkit.exceptions import ParseError

from release_engine.exceptions import ManifestMalformedError

logger = logging.getLogger(__name__)

VersionMap = Mapping[str, str]


@dataclass(frozen=True)
class Ecosystem:
    """Manifest policy for one packaging ecosystem."""

    name: str
    manifest_filename: str
    initial_version: str
    read_package_name: Callable[[tomlkit.TOMLDocument], str | None]
    read_members: Callable[[tomlkit.TOMLDocument], list[str]]
    # Rewrites versions in place; returns whether anything changed.
    rewrite_versions: Callable[[tomlkit.TOMLDocument, VersionMap, str | None], bool]
    default_manifest: Callable[[str, str], str]
    normalize_name: Callable[[str], str] = str

    def normalize_versions(self, versions: VersionMap) -> dict[str, str]:
        """Key ``versions`` by the ecosystem's canonical package names."""
        return {self.normalize_name(name): version for name, version in versions.items()}


def parse_manifest(content: str, path: str) -> tomlkit.TOMLDocument:
    """Parse manifest text.

    Raises:
        ManifestMalformedError: If the content is not valid TOML.
    """
    try:
        return tomlkit.parse(content)
    except ParseError as e:
        raise ManifestMalformedError(path, f"expected a TOML document, {e}") from e


def _table(container: Any, *keys: str) -> dict[str, Any] | None:
    """Walk nested tables, returning None as soon as a level is missing."""
    current = container
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, dict) else None


def _set_string(table: dict[str, Any], key: str, value: str) -> bool:
    """Set ``table[key]`` to ``value`` if it holds a different string."""
    current = table.get(key)
    if not isinstance(current, str) or str(current) == value:
        return False
    table[key] = value
    return True


# Cargo
#
# [package]
# name = "crate1"
# version = "0.1.0"
#
# [dependencies]
# crate2 = "0.2.0"
# renamed = { package = "crate3", path = "../crate3", version = "0.3.0" }

_CARGO_DEPENDENCY_KEYS = ("dependencies", "dev-dependencies", "build-dependencies")
# Leading requirement operator of a Cargo version requirement, e.g. "=", "^", "~".
_CARGO_REQUIREMENT_PREFIX = re.compile(r"^\s*([=^~]\s*)?")


def _cargo_requirement(current: str, version: str) -> str:
    if "," in current or any(op in current for op in "<>*"):
        return version
    prefix = _CARGO_REQUIREMENT_PREFIX.match(current)
    return f"{prefix.group(1) or ''}{version}" if prefix else version


def _cargo_dependency_tables(doc: tomlkit.TOMLDocument) -> list[dict[str, Any]]:
    tables = [t for key in _CARGO_DEPENDENCY_KEYS if (t := _table(doc, key)) is not None]
    workspace_deps = _table(doc, "workspace", "dependencies")
    if workspace_deps is not None:
        tables.append(workspace_deps)
    targets = _table(doc, "target")
    if targets is not None:
        for target in targets.values():
            tables += [t for key in _CARGO_DEPENDENCY_KEYS if (t := _table(target, key)) is not None]
    return tables


def _cargo_pin_dependencies(table: dict[str, Any], versions: VersionMap) -> bool:
    changed = False
    for key in list(table.keys()):
        spec = table[key]
        if isinstance(spec, str):
            if key in versions:
                changed |= _set_string(table, key, _cargo_requirement(str(spec), versions[key]))
        elif isinstance(spec, dict):
            name = str(spec.get("package", key))
            current = spec.get("version")
            if name in versions and isinstance(current, str):
                changed |= _set_string(spec, "version", _cargo_requirement(str(current), versions[name]))
    return changed


def _cargo_package_name(doc: tomlkit.TOMLDocument) -> str | None:
    package = _table(doc, "package")
    name = package.get("name") if package is not None else None
    return str(name) if name is not None else None


def _cargo_members(doc: tomlkit.TOMLDocument) -> list[str]:
    workspace = _table(doc, "workspace")
    members = workspace.get("members") if workspace is not None else None
    return [str(m) for m in members] if isinstance(members, list) else []


def _cargo_rewrite(doc: tomlkit.TOMLDocument, versions: VersionMap, package_name: str | None) -> bool:
    changed = False
    package = _table(doc, "package")
    if package is not None:
        name = package_name or _cargo_package_name(doc)
        if name in versions:
            changed |= _set_string(package, "version", versions[name])
    for table in _cargo_dependency_tables(doc):
        changed |= _cargo_pin_dependencies(table, versions)
    return changed


def _cargo_default_manifest(name: str, version: str) -> str:
    return f'[package]\nname = "{name}"\nversion = "{version}"\n'


CARGO = Ecosystem(
    name="cargo",
    manifest_filename="Cargo.toml",
    initial_version="0.1.0",
    read_package_name=_cargo_package_name,
    read_members=_cargo_members,
    rewrite_versions=_cargo_rewrite,
    default_manifest=_cargo_default_manifest,
)


# Python (PEP 621 + uv workspaces)
#
# [project]
# name = "pkg-a"
# version = "0.1.0"
# dependencies = ["pkg-b>=0.2.0"]
#
# [tool.uv.workspace]
# members = ["packages/pkg-a", "packages/pkg-b"]

# Operators kept when re-pinning; anything else becomes an exact pin.
_KEPT_OPERATORS = frozenset({"==", "~=", ">=", "==="})


def pin_requirement(dep_str: str, version: str) -> str | None:
    """Point a PEP 508 requirement at ``version``.

    A single ``==``, ``~=``, ``>=`` or ``===`` clause keeps its operator; any
    other specifier becomes ``==version``. Requirements without a specifier
    are left alone (returns None), as are ones already at ``version``.

    Raises:
        packaging.requirements.InvalidRequirement: If ``dep_str`` is not PEP 508.
    """
    req = Requirement(dep_str)
    specs = list(req.specifier)
    if not specs:
        return None
    operator = specs[0].operator if len(specs) == 1 and specs[0].operator in _KEPT_OPERATORS else "=="
    if len(specs) == 1 and specs[0].operator == operator and specs[0].version == version:
        return None
    # Sort extras alphabetically for consistent output
    extras = f"[{','.join(sorted(req.extras))}]" if req.extras else ""
    marker = f"; {req.marker}" if req.marker else ""
    return f"{req.name}{extras}{operator}{version}{marker}"


def _python_pin_list(deps: Any, versions: VersionMap) -> bool:
    if not isinstance(deps, list):
        return False
    changed = False
    for i, dep in enumerate(deps):
        # dependency-groups may hold {include-group = "..."} tables
        if not isinstance(dep, str):
            continue
        name = canonicalize_name(Requirement(str(dep)).name)
        if name not in versions:
            continue
        pinned = pin_requirement(str(dep), versions[name])
        if pinned is not None:
            deps[i] = pinned
            changed = True
    return changed


def _python_package_name(doc: tomlkit.TOMLDocument) -> str | None:
    project = _table(doc, "project")
    name = project.get("name") if project is not None else None
    return canonicalize_name(str(name)) if name is not None else None


def _python_members(doc: tomlkit.TOMLDocument) -> list[str]:
    workspace = _table(doc, "tool", "uv", "workspace")
    members = workspace.get("members") if workspace is not None else None
    return [str(m) for m in members] if isinstance(members, list) else []


def _python_rewrite(doc: tomlkit.TOMLDocument, versions: VersionMap, package_name: str | None) -> bool:
    changed = False
    project = _table(doc, "project")
    if project is not None:
        name = canonicalize_name(package_name) if package_name else _python_package_name(doc)
        if name in versions:
            changed |= _set_string(project, "version", versions[name])
        changed |= _python_pin_list(project.get("dependencies"), versions)
        optional = _table(project, "optional-dependencies")
        if optional is not None:
            for group in optional.values():
                changed |= _python_pin_list(group, versions)
    groups = _table(doc, "dependency-groups")
    if groups is not None:
        for group in groups.values():
            changed |= _python_pin_list(group, versions)
    return changed


def _python_default_manifest(name: str, version: str) -> str:
    return f'[project]\nname = "{name}"\nversion = "{version}"\n'


PYTHON = Ecosystem(
    name="python",
    manifest_filename="pyproject.toml",
    initial_version="0.1.0",
    read_package_name=_python_package_name,
    read_members=_python_members,
    rewrite_versions=_python_rewrite,
    default_manifest=_python_default_manifest,
    normalize_name=canonicalize_name,
)


ECOSYSTEMS: dict[str, Ecosystem] = {eco.name: eco for eco in (CARGO, PYTHON)}


def get_ecosystem(name: str) -> Ecosystem:
    """Look up an ecosystem policy by name.

    Raises:
        KeyError: If the ecosystem is unknown.
    """
    try:
        return ECOSYSTEMS[name]
    except KeyError:
        raise KeyError(f"Unknown ecosystem {name!r}; expected one of {sorted(ECOSYSTEMS)}") from None

"""Manifest discovery.

Decides which manifest files a release must touch: the package's own
manifest, or, for a workspace, the manifest of every declared member plus
the workspace root.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from release_engine.project.ecosystems import Ecosystem, parse_manifest

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True)
class ManifestTarget:
    """One manifest to update.

    Attributes:
        path: Path of the manifest relative to the repository root.
        package_name: Name of the package the manifest governs, when known
            up front. ``None`` means "read it from the manifest itself".
        members: Member directories declared by a workspace root; empty for
            ordinary package manifests.
    """

    path: str
    package_name: str | None = None
    members: tuple[str, ...] = ()

    @property
    def is_workspace_root(self) -> bool:
        return bool(self.members)


def _join(directory: str | None, filename: str) -> str:
    directory = (directory or "").strip().strip("/")
    if directory in ("", "."):
        return filename
    return f"{directory}/{filename}"


def locate_manifests(
    root_content: str | None,
    package_name: str,
    ecosystem: Ecosystem,
    *,
    path: str | None = None,
) -> list[ManifestTarget]:
    """Find the manifests to update for ``package_name``.

    Args:
        root_content: Content of the repository root manifest, ``None`` when
            the provider did not find one.
        package_name: The package being released.
        ecosystem: Manifest policy (filename, member list reader).
        path: Directory of the package inside the repository, if any.

    Returns:
        Workspace: the root target (carrying its members) followed by one
        target per member, in declaration order. Otherwise a single target
        for the package manifest.

    Raises:
        ManifestMalformedError: If ``root_content`` is present but unparsable.
    """
    filename = ecosystem.manifest_filename
    single = [ManifestTarget(path=_join(path, filename), package_name=package_name)]

    if root_content is None:
        logger.info("No root %s found, treating %s as a single package", filename, package_name)
        return single

    doc = parse_manifest(root_content, filename)
    declared = ecosystem.read_members(doc)
    if not declared:
        logger.info("Single package found, updating %s", single[0].path)
        return single

    members: list[str] = []
    for member in declared:
        member = member.strip().strip("/")
        if _GLOB_CHARS & set(member):
            logger.warning("Skipping workspace member pattern %r: globs are not expanded", member)
            continue
        if member not in members:
            members.append(member)

    own_path = (path or "").strip("/")
    root_name = ecosystem.read_package_name(doc)
    targets = [
        ManifestTarget(
            path=filename,
            package_name=package_name if not own_path and root_name is not None else None,
            members=tuple(members),
        )
    ]
    for member in members:
        targets.append(
            ManifestTarget(
                path=_join(member, filename),
                package_name=package_name if member == own_path else None,
            )
        )
    logger.info("Found workspace with %d members, updating all", len(members))
    return targets

"""Manifest version updater."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import tomlkit

from release_engine.exceptions import ManifestMalformedError, VersionNotFoundError
from release_engine.project.ecosystems import Ecosystem, parse_manifest
from release_engine.updaters.base import UpdateKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestVersionUpdater:
    """Rewrites package versions and internal dependency pins in a manifest.

    Only fields belonging to packages named in ``versions`` change: the
    manifest's own version when its package is in the mapping, and every
    dependency requirement that points at a package in the mapping. All other
    bytes are preserved. When nothing needs to change the input string is
    returned as is.

    Attributes:
        path: Manifest path relative to the repository root.
        versions: Package name → new version, limited to released packages.
        ecosystem: Manifest policy used to read and rewrite the document.
        package_name: Name the manifest governs; read from the file when None.
    """

    path: str
    versions: Mapping[str, str]
    ecosystem: Ecosystem
    package_name: str | None = None
    kind: UpdateKind = field(default=UpdateKind.MANIFEST_VERSION)

    def compute_new_content(self, old_content: str | None) -> str:
        if old_content is None:
            name = self.package_name
            if name is None or name not in self.versions:
                raise VersionNotFoundError(
                    f"{self.path} does not exist and governs no released package"
                )
            logger.debug("Creating %s for %s", self.path, name)
            return self.ecosystem.default_manifest(name, self.versions[name])

        doc = parse_manifest(old_content, self.path)
        try:
            changed = self.ecosystem.rewrite_versions(
                doc, self.ecosystem.normalize_versions(self.versions), self.package_name
            )
        except ValueError as e:
            # packaging.requirements.InvalidRequirement and tomlkit errors
            raise ManifestMalformedError(self.path, str(e)) from e
        if not changed:
            logger.debug("%s already up to date", self.path)
            return old_content
        return tomlkit.dumps(doc)

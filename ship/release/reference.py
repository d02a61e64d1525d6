"""Image references and build inputs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.release.errors import InvalidReference

__all__ = [
    "LATEST_TAG",
    "BuildContext",
    "ImageReference",
    "release_references",
]

LATEST_TAG = "latest"

_HOST_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::[0-9]{1,5})?$")
_REPO_COMPONENT_RE = re.compile(r"^[a-z0-9]+(?:(?:[._]|__|-+)[a-z0-9]+)*$")
_TAG_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]{0,127}$")


@dataclass(frozen=True, slots=True)
class ImageReference:
    """A fully-qualified image reference: ``registry/repository:tag``."""

    registry: str
    repository: str
    tag: str

    @property
    def uri(self) -> str:
        return f"{self.registry}/{self.repository}:{self.tag}"

    def with_tag(self, tag: str) -> ImageReference:
        return ImageReference(registry=self.registry, repository=self.repository, tag=tag)

    def validate(self) -> Result[ImageReference, InvalidReference]:
        if not _HOST_RE.match(self.registry):
            return Err(InvalidReference(self.uri, f"bad registry host {self.registry!r}"))
        if not self.repository:
            return Err(InvalidReference(self.uri, "empty repository name"))
        for component in self.repository.split("/"):
            if not _REPO_COMPONENT_RE.match(component):
                return Err(
                    InvalidReference(self.uri, f"bad repository component {component!r}")
                )
        if not _TAG_RE.match(self.tag):
            return Err(InvalidReference(self.uri, f"bad tag {self.tag!r}"))
        return Ok(self)

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True, slots=True)
class BuildContext:
    """Directory handed to the build engine, with an optional Dockerfile."""

    directory: Path
    dockerfile: Path | None = None


def release_references(
    *, registry: str, repository: str, version: str
) -> tuple[ImageReference, ImageReference]:
    """Return the (versioned, latest) references published by one release."""
    versioned = ImageReference(registry=registry, repository=repository, tag=version)
    return versioned, versioned.with_tag(LATEST_TAG)

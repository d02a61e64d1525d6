"""Deployment descriptor (``deploy.env``).

The descriptor records the most recent successful release for downstream
deployment tooling:

    IMAGE_TAG=20240101-120000
    REGISTRY=registry.example.com
    IMAGE_NAME=acme/ip

Each write replaces the whole file. It is not a release history.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ship.core.result import Err, Ok, Result
from ship.platform.files import atomic_write_text
from ship.release.errors import DescriptorWriteError

__all__ = [
    "DESCRIPTOR_KEYS",
    "DeploymentDescriptor",
    "DescriptorReadError",
    "DeploymentDescriptorWriter",
    "DescriptorWriter",
    "parse_descriptor",
    "read_descriptor",
]

DESCRIPTOR_KEYS = ("IMAGE_TAG", "REGISTRY", "IMAGE_NAME")


@dataclass(frozen=True, slots=True)
class DeploymentDescriptor:
    registry: str
    image_name: str
    version: str

    def as_pairs(self) -> list[tuple[str, str]]:
        return [
            ("IMAGE_TAG", self.version),
            ("REGISTRY", self.registry),
            ("IMAGE_NAME", self.image_name),
        ]

    def render(self) -> str:
        return "".join(f"{key}={value}\n" for key, value in self.as_pairs())

    @property
    def image_uri(self) -> str:
        return f"{self.registry}/{self.image_name}:{self.version}"


@dataclass(frozen=True, slots=True)
class DescriptorReadError:
    path: Path
    message: str
    hint: str | None = None


class DescriptorWriter(Protocol):
    def write(
        self, descriptor_path: Path, descriptor: DeploymentDescriptor
    ) -> Result[None, DescriptorWriteError]: ...


class DeploymentDescriptorWriter:
    """Writes the descriptor atomically, replacing any previous content."""

    def write(
        self, descriptor_path: Path, descriptor: DeploymentDescriptor
    ) -> Result[None, DescriptorWriteError]:
        try:
            atomic_write_text(descriptor_path, descriptor.render())
        except OSError as e:
            return Err(DescriptorWriteError(path=descriptor_path, reason=e.strerror or str(e)))
        return Ok(None)


def parse_descriptor(text: str) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines. Blank lines and ``#`` comments are skipped."""
    values: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    return values


def read_descriptor(path: Path) -> Result[DeploymentDescriptor, DescriptorReadError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(
            DescriptorReadError(
                path=path,
                message=f"no descriptor at {path}",
                hint="Run: ship release",
            )
        )
    except (OSError, UnicodeDecodeError) as e:
        return Err(DescriptorReadError(path=path, message=f"cannot read {path}: {e}"))

    values = parse_descriptor(text)
    missing = [key for key in DESCRIPTOR_KEYS if not values.get(key)]
    if missing:
        return Err(
            DescriptorReadError(
                path=path,
                message=f"descriptor {path} is missing {', '.join(missing)}",
            )
        )
    return Ok(
        DeploymentDescriptor(
            registry=values["REGISTRY"],
            image_name=values["IMAGE_NAME"],
            version=values["IMAGE_TAG"],
        )
    )

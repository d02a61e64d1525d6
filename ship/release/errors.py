"""Error values for each release step.

Every error carries a human readable ``message`` and optional ``hint``, and a
``label`` naming its class in diagnostics (``AuthError``, ``NetworkError``...).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class DockerMissing:
    label: ClassVar[str] = "DockerMissing"

    executable: str = "docker"

    @property
    def message(self) -> str:
        return f"{self.executable}: missing"

    @property
    def hint(self) -> str | None:
        return "Install Docker: https://docs.docker.com/get-docker/"


@dataclass(frozen=True, slots=True)
class AuthError:
    label: ClassVar[str] = "AuthError"

    registry: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"login to {self.registry} failed"

    @property
    def hint(self) -> str | None:
        return self.detail or "Check registry credentials (SHIP_REGISTRY_USERNAME / SHIP_REGISTRY_PASSWORD)"


@dataclass(frozen=True, slots=True)
class BuildError:
    label: ClassVar[str] = "BuildError"

    local_tag: str
    returncode: int
    detail: str = ""

    @property
    def message(self) -> str:
        if self.returncode < 0:
            return f"build of {self.local_tag} could not start"
        return f"build of {self.local_tag} failed (exit {self.returncode})"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class ImageNotFound:
    label: ClassVar[str] = "ImageNotFound"

    reference: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"local image not found: {self.reference}"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class InvalidReference:
    label: ClassVar[str] = "InvalidReference"

    reference: str
    reason: str

    @property
    def message(self) -> str:
        return f"invalid image reference {self.reference!r}: {self.reason}"

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class TagFailed:
    """``docker tag`` failed for a reason other than a missing image or bad name."""

    label: ClassVar[str] = "TagError"

    target: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"could not tag {self.target}"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class NetworkError:
    label: ClassVar[str] = "NetworkError"

    reference: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"network failure pushing {self.reference}"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class PushAuthError:
    """Registry refused the push credentials (expired or insufficient)."""

    label: ClassVar[str] = "AuthError"

    reference: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"registry denied push of {self.reference}"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class RegistryRejected:
    label: ClassVar[str] = "RegistryRejected"

    reference: str
    detail: str = ""

    @property
    def message(self) -> str:
        return f"registry rejected {self.reference}"

    @property
    def hint(self) -> str | None:
        return self.detail or None


@dataclass(frozen=True, slots=True)
class DescriptorWriteError:
    label: ClassVar[str] = "IOError"

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"cannot write descriptor {self.path}: {self.reason}"

    @property
    def hint(self) -> str | None:
        return None


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The run was interrupted (Ctrl-C) while a step was in progress."""

    label: ClassVar[str] = "Cancelled"

    @property
    def message(self) -> str:
        return "release cancelled"

    @property
    def hint(self) -> str | None:
        return None


LoginError = AuthError | DockerMissing

TagError = ImageNotFound | InvalidReference | TagFailed

PushError = NetworkError | PushAuthError | RegistryRejected

StepError = LoginError | BuildError | TagError | PushError | DescriptorWriteError | Cancelled

"""In-memory stand-ins for docker and the registry.

``FakeRegistry`` models a local image store plus a remote registry with
mutable tags; ``FakeImageBuilder`` adds images to the same local store.
They record every call so tests can assert on ordering and call counts.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.release.errors import (
    BuildError,
    DescriptorWriteError,
    ImageNotFound,
    LoginError,
    PushAuthError,
    PushError,
    RegistryRejected,
    TagError,
)
from ship.release.descriptor import DeploymentDescriptor
from ship.release.reference import BuildContext, ImageReference

__all__ = ["FakeClock", "FakeRegistry", "FakeImageBuilder", "FailingDescriptorWriter"]


@dataclass
class FakeClock:
    """Callable clock that only moves when told to."""

    now: datetime

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def _digest(text: str) -> str:
    return "sha256:" + hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass
class FakeRegistry:
    """RegistryClient double.

    ``local`` maps local references to image digests, ``remote`` maps pushed
    URIs to digests. Failures are injected per operation.
    """

    local: dict[str, str] = field(default_factory=dict)
    remote: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    auth_failure: LoginError | None = None
    tag_failures: dict[str, TagError] = field(default_factory=dict)
    push_failures: dict[str, PushError] = field(default_factory=dict)
    _authenticated: set[str] = field(default_factory=set)

    def authenticate(self, registry_host: str) -> Result[None, LoginError]:
        self.calls.append(("authenticate", registry_host))
        if self.auth_failure is not None:
            return Err(self.auth_failure)
        self._authenticated.add(registry_host)
        return Ok(None)

    def tag_image(self, local_reference: str, target: ImageReference) -> Result[None, TagError]:
        self.calls.append(("tag", target.uri))
        injected = self.tag_failures.get(target.uri)
        if injected is not None:
            return Err(injected)

        valid = target.validate()
        if isinstance(valid, Err):
            return valid
        digest = self.local.get(local_reference)
        if digest is None:
            return Err(ImageNotFound(reference=local_reference))
        self.local[target.uri] = digest
        return Ok(None)

    def push(self, reference: ImageReference) -> Result[None, PushError]:
        self.calls.append(("push", reference.uri))
        injected = self.push_failures.get(reference.uri)
        if injected is not None:
            return Err(injected)

        if reference.registry not in self._authenticated:
            return Err(PushAuthError(reference=reference.uri, detail="unauthorized"))
        digest = self.local.get(reference.uri)
        if digest is None:
            return Err(
                RegistryRejected(reference=reference.uri, detail="tag does not exist locally")
            )
        self.remote[reference.uri] = digest
        return Ok(None)

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def fail_push(self, reference: ImageReference, error: PushError) -> None:
        self.push_failures[reference.uri] = error

    def recover(self) -> None:
        """Clear every injected failure."""
        self.auth_failure = None
        self.tag_failures.clear()
        self.push_failures.clear()


@dataclass
class FakeImageBuilder:
    """ImageBuilder double writing into a FakeRegistry's local store."""

    registry: FakeRegistry
    failure: BuildError | None = None
    source: str = "service-v1"
    builds: list[tuple[BuildContext, str]] = field(default_factory=list)

    def build(self, context: BuildContext, local_tag: str) -> Result[None, BuildError]:
        self.builds.append((context, local_tag))
        if self.failure is not None:
            return Err(self.failure)
        self.registry.local[local_tag] = _digest(f"{context.directory}:{self.source}")
        return Ok(None)


@dataclass
class FailingDescriptorWriter:
    """Descriptor writer that always fails, as on a full or read-only disk."""

    reason: str = "No space left on device"
    attempts: int = 0

    def write(
        self, descriptor_path: Path, descriptor: DeploymentDescriptor
    ) -> Result[None, DescriptorWriteError]:
        del descriptor
        self.attempts += 1
        return Err(DescriptorWriteError(path=descriptor_path, reason=self.reason))

"""Registry access: login, local tagging and push.

``RegistryClient`` is the capability the pipeline depends on. The production
implementation drives the docker CLI; tests substitute an in-memory double.
Tags are mutable on the registry side: pushing an existing tag overwrites it.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ship.core.result import Err, Ok, Result
from ship.platform.process import ProcessError, run, run_silent, run_streaming
from ship.release.errors import (
    AuthError,
    DockerMissing,
    ImageNotFound,
    InvalidReference,
    LoginError,
    NetworkError,
    PushAuthError,
    PushError,
    RegistryRejected,
    TagError,
    TagFailed,
)
from ship.release.reference import ImageReference

__all__ = [
    "USERNAME_ENV_VAR",
    "PASSWORD_ENV_VAR",
    "Credentials",
    "RegistryClient",
    "DockerRegistryClient",
    "classify_push_failure",
    "ensure_docker_available",
]

USERNAME_ENV_VAR = "SHIP_REGISTRY_USERNAME"
PASSWORD_ENV_VAR = "SHIP_REGISTRY_PASSWORD"

_AUTH_MARKERS = (
    "unauthorized",
    "authentication required",
    "no basic auth credentials",
    "access to the resource is denied",
    "access denied",
    "forbidden",
    "insufficient_scope",
)

_NETWORK_MARKERS = (
    "timed out",
    "timeout",
    "connection reset",
    "connection refused",
    "no such host",
    "network is unreachable",
    "temporary failure in name resolution",
    "tls handshake",
    "dial tcp",
    "unexpected eof",
    "broken pipe",
    "bad gateway",
    "service unavailable",
    "gateway timeout",
)


@dataclass(frozen=True, slots=True)
class Credentials:
    """Registry login material. Held in memory only."""

    username: str
    password: str = field(repr=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> Credentials | None:
        """Read credentials from an explicit environment mapping.

        Returns None unless both username and password are set.
        """
        username = environ.get(USERNAME_ENV_VAR, "").strip()
        password = environ.get(PASSWORD_ENV_VAR, "")
        if not username or not password:
            return None
        return cls(username=username, password=password)


class RegistryClient(Protocol):
    def authenticate(self, registry_host: str) -> Result[None, LoginError]: ...

    def tag_image(self, local_reference: str, target: ImageReference) -> Result[None, TagError]: ...

    def push(self, reference: ImageReference) -> Result[None, PushError]: ...


def ensure_docker_available(executable: str = "docker") -> Result[None, DockerMissing]:
    if shutil.which(executable) is None:
        return Err(DockerMissing(executable=executable))
    return Ok(None)


def classify_push_failure(reference: ImageReference, error: ProcessError) -> PushError:
    """Map a failed ``docker push`` to NetworkError, PushAuthError or RegistryRejected."""
    detail = error.output
    text = detail.lower()
    if any(marker in text for marker in _AUTH_MARKERS):
        return PushAuthError(reference=reference.uri, detail=detail)
    if not error.started or any(marker in text for marker in _NETWORK_MARKERS):
        return NetworkError(reference=reference.uri, detail=detail)
    return RegistryRejected(reference=reference.uri, detail=detail)


class DockerRegistryClient:
    """RegistryClient backed by the docker CLI."""

    def __init__(
        self,
        *,
        cwd: Path,
        credentials: Credentials | None = None,
        docker: str = "docker",
    ) -> None:
        self._cwd = cwd
        self._credentials = credentials
        self._docker = docker

    def authenticate(self, registry_host: str) -> Result[None, LoginError]:
        available = ensure_docker_available(self._docker)
        if isinstance(available, Err):
            return available

        if self._credentials is None:
            # Interactive: docker prompts on the terminal or uses its credential store.
            interactive = run_silent([self._docker, "login", registry_host], cwd=self._cwd)
            if isinstance(interactive, Err):
                return Err(AuthError(registry=registry_host, detail=interactive.error.output))
            return Ok(None)

        result = run(
            [
                self._docker,
                "login",
                registry_host,
                "--username",
                self._credentials.username,
                "--password-stdin",
            ],
            cwd=self._cwd,
            input=self._credentials.password,
        )
        if isinstance(result, Err):
            return Err(AuthError(registry=registry_host, detail=result.error.output))
        return Ok(None)

    def tag_image(self, local_reference: str, target: ImageReference) -> Result[None, TagError]:
        valid = target.validate()
        if isinstance(valid, Err):
            return valid

        result = run([self._docker, "tag", local_reference, target.uri], cwd=self._cwd)
        if isinstance(result, Ok):
            return Ok(None)

        detail = result.error.output
        text = detail.lower()
        if "no such image" in text:
            return Err(ImageNotFound(reference=local_reference, detail=detail))
        if "invalid reference" in text or "parsing reference" in text:
            return Err(InvalidReference(reference=target.uri, reason=detail))
        return Err(TagFailed(target=target.uri, detail=detail))

    def push(self, reference: ImageReference) -> Result[None, PushError]:
        result = run_streaming([self._docker, "push", reference.uri], cwd=self._cwd)
        if isinstance(result, Err):
            return Err(classify_push_failure(reference, result.error))
        return Ok(None)

"""Tests for ship.release.registry (docker CLI driven)."""

from __future__ import annotations

from pathlib import Path

import pytest

from ship.core.result import Err, Ok, Result
from ship.platform.process import ProcessError
from ship.release import registry as registry_mod
from ship.release.errors import (
    AuthError,
    DockerMissing,
    ImageNotFound,
    InvalidReference,
    NetworkError,
    PushAuthError,
    RegistryRejected,
    TagFailed,
)
from ship.release.reference import ImageReference
from ship.release.registry import Credentials, DockerRegistryClient, classify_push_failure

REF = ImageReference(registry="registry.test", repository="acme/ip", tag="20240101-120000")


def _err(cmd: list[str], *, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=returncode, stdout="", stderr=stderr))


class FakeProcess:
    def __init__(self) -> None:
        self.calls: list[dict[str, object]] = []
        self.responses: list[Result[str, ProcessError]] = []

    def run(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        *,
        input: str | None = None,
        timeout: float | None = None,
    ) -> Result[str, ProcessError]:
        del env, timeout
        self.calls.append({"cmd": cmd, "cwd": cwd, "input": input})
        if self.responses:
            return self.responses.pop(0)
        return Ok("")

    def run_silent(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
    ) -> Result[None, ProcessError]:
        del env
        self.calls.append({"cmd": cmd, "cwd": cwd, "input": None})
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Err):
                return response
        return Ok(None)

    def run_streaming(
        self,
        cmd: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
        **kwargs: object,
    ) -> Result[None, ProcessError]:
        del kwargs
        return self.run_silent(cmd, cwd, env)


@pytest.fixture
def proc(monkeypatch: pytest.MonkeyPatch) -> FakeProcess:
    fake = FakeProcess()
    monkeypatch.setattr(registry_mod, "run", fake.run)
    monkeypatch.setattr(registry_mod, "run_silent", fake.run_silent)
    monkeypatch.setattr(registry_mod, "run_streaming", fake.run_streaming)
    monkeypatch.setattr(registry_mod.shutil, "which", lambda name: f"/usr/bin/{name}")
    return fake


class TestCredentials:
    def test_from_env(self) -> None:
        creds = Credentials.from_env(
            {"SHIP_REGISTRY_USERNAME": " deploy ", "SHIP_REGISTRY_PASSWORD": "s3cret"}
        )
        assert creds == Credentials(username="deploy", password="s3cret")

    def test_from_env_requires_both(self) -> None:
        assert Credentials.from_env({"SHIP_REGISTRY_USERNAME": "deploy"}) is None
        assert Credentials.from_env({"SHIP_REGISTRY_PASSWORD": "s3cret"}) is None
        assert Credentials.from_env({}) is None

    def test_repr_hides_password(self) -> None:
        assert "s3cret" not in repr(Credentials(username="deploy", password="s3cret"))


class TestAuthenticate:
    def test_password_goes_through_stdin(self, proc: FakeProcess, tmp_path: Path) -> None:
        client = DockerRegistryClient(
            cwd=tmp_path, credentials=Credentials(username="deploy", password="s3cret")
        )

        assert isinstance(client.authenticate("registry.test"), Ok)

        call = proc.calls[0]
        assert call["cmd"] == [
            "docker",
            "login",
            "registry.test",
            "--username",
            "deploy",
            "--password-stdin",
        ]
        assert call["input"] == "s3cret"
        assert "s3cret" not in call["cmd"]  # type: ignore[operator]

    def test_interactive_without_credentials(self, proc: FakeProcess, tmp_path: Path) -> None:
        client = DockerRegistryClient(cwd=tmp_path)

        assert isinstance(client.authenticate("registry.test"), Ok)
        assert proc.calls[0]["cmd"] == ["docker", "login", "registry.test"]

    def test_rejected_login(self, proc: FakeProcess, tmp_path: Path) -> None:
        proc.responses.append(_err(["docker", "login"], stderr="unauthorized: incorrect username"))
        client = DockerRegistryClient(
            cwd=tmp_path, credentials=Credentials(username="deploy", password="wrong")
        )

        result = client.authenticate("registry.test")

        assert isinstance(result, Err)
        assert isinstance(result.error, AuthError)
        assert result.error.registry == "registry.test"
        assert "incorrect username" in (result.error.hint or "")

    def test_missing_docker_fails_before_login(
        self, proc: FakeProcess, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setattr(registry_mod.shutil, "which", lambda name: None)
        client = DockerRegistryClient(cwd=tmp_path, docker="podman")

        result = client.authenticate("registry.test")

        assert result == Err(DockerMissing(executable="podman"))
        assert proc.calls == []


class TestTagImage:
    def test_tags_local_image(self, proc: FakeProcess, tmp_path: Path) -> None:
        client = DockerRegistryClient(cwd=tmp_path)

        assert isinstance(client.tag_image("acme/ip", REF), Ok)
        assert proc.calls[0]["cmd"] == ["docker", "tag", "acme/ip", REF.uri]

    def test_invalid_target_never_reaches_docker(self, proc: FakeProcess, tmp_path: Path) -> None:
        client = DockerRegistryClient(cwd=tmp_path)

        result = client.tag_image("acme/ip", REF.with_tag("not:valid"))

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidReference)
        assert proc.calls == []

    def test_missing_local_image(self, proc: FakeProcess, tmp_path: Path) -> None:
        proc.responses.append(
            _err(["docker", "tag"], stderr="Error response from daemon: No such image: acme/ip:latest")
        )
        client = DockerRegistryClient(cwd=tmp_path)

        result = client.tag_image("acme/ip", REF)

        assert isinstance(result, Err)
        assert isinstance(result.error, ImageNotFound)
        assert result.error.reference == "acme/ip"

    def test_daemon_down_is_not_a_missing_image(self, proc: FakeProcess, tmp_path: Path) -> None:
        proc.responses.append(
            _err(
                ["docker", "tag"],
                stderr="Cannot connect to the Docker daemon at unix:///var/run/docker.sock.",
            )
        )
        client = DockerRegistryClient(cwd=tmp_path)

        result = client.tag_image("acme/ip", REF)

        assert isinstance(result, Err)
        assert isinstance(result.error, TagFailed)
        assert result.error.target == REF.uri
        assert "Cannot connect to the Docker daemon" in (result.error.hint or "")

    def test_docker_rejects_reference(self, proc: FakeProcess, tmp_path: Path) -> None:
        proc.responses.append(
            _err(["docker", "tag"], stderr='Error parsing reference: "x" is not a valid repository/tag')
        )
        client = DockerRegistryClient(cwd=tmp_path)

        result = client.tag_image("acme/ip", REF)

        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidReference)


class TestPush:
    def test_push_ok(self, proc: FakeProcess, tmp_path: Path) -> None:
        client = DockerRegistryClient(cwd=tmp_path, docker="podman")

        assert isinstance(client.push(REF), Ok)
        assert proc.calls[0]["cmd"] == ["podman", "push", REF.uri]

    @pytest.mark.parametrize(
        ("stderr", "returncode", "expected"),
        [
            ("dial tcp 10.0.0.1:443: connect: connection refused", 1, NetworkError),
            ("net/http: TLS handshake timeout", 1, NetworkError),
            ("Command timed out after 60.0s", -1, NetworkError),
            ("unauthorized: authentication required", 1, PushAuthError),
            ("denied: requested access to the resource is denied", 1, PushAuthError),
            ("manifest invalid: manifest invalid", 1, RegistryRejected),
            ("quota exceeded", 1, RegistryRejected),
        ],
    )
    def test_failure_classification(
        self,
        proc: FakeProcess,
        tmp_path: Path,
        stderr: str,
        returncode: int,
        expected: type,
    ) -> None:
        proc.responses.append(_err(["docker", "push"], stderr=stderr, returncode=returncode))
        client = DockerRegistryClient(cwd=tmp_path)

        result = client.push(REF)

        assert isinstance(result, Err)
        assert isinstance(result.error, expected)
        assert result.error.reference == REF.uri


def test_classify_keeps_diagnostic() -> None:
    error = ProcessError(("docker", "push"), 1, "partial output", "connection reset by peer")

    classified = classify_push_failure(REF, error)

    assert isinstance(classified, NetworkError)
    assert "connection reset by peer" in classified.detail
    assert "partial output" in classified.detail


def test_ensure_docker_available(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(registry_mod.shutil, "which", lambda name: None)

    result = registry_mod.ensure_docker_available()

    assert isinstance(result, Err)
    assert result.error == DockerMissing(executable="docker")

    monkeypatch.setattr(registry_mod.shutil, "which", lambda name: f"/usr/bin/{name}")
    assert isinstance(registry_mod.ensure_docker_available(), Ok)

"""Local image build."""

from __future__ import annotations

from typing import Protocol

from ship.core.result import Err, Ok, Result
from ship.platform.process import NOT_STARTED, run_streaming
from ship.release.errors import BuildError
from ship.release.reference import BuildContext

__all__ = ["ImageBuilder", "DockerImageBuilder", "build_command"]


class ImageBuilder(Protocol):
    def build(self, context: BuildContext, local_tag: str) -> Result[None, BuildError]: ...


def build_command(context: BuildContext, local_tag: str, *, docker: str = "docker") -> list[str]:
    cmd = [docker, "build", "-t", local_tag]
    if context.dockerfile is not None:
        cmd += ["-f", str(context.dockerfile)]
    cmd.append(str(context.directory))
    return cmd


class DockerImageBuilder:
    """ImageBuilder running ``docker build`` with output streamed to the terminal.

    The tail of docker's output becomes ``BuildError.detail``. Cleaning up
    intermediate layers after a failed build is left to docker.
    """

    def __init__(self, *, docker: str = "docker") -> None:
        self._docker = docker

    def build(self, context: BuildContext, local_tag: str) -> Result[None, BuildError]:
        if not context.directory.is_dir():
            return Err(
                BuildError(
                    local_tag=local_tag,
                    returncode=NOT_STARTED,
                    detail=f"build context not found: {context.directory}",
                )
            )
        if context.dockerfile is not None and not context.dockerfile.is_file():
            return Err(
                BuildError(
                    local_tag=local_tag,
                    returncode=NOT_STARTED,
                    detail=f"Dockerfile not found: {context.dockerfile}",
                )
            )

        resolved = BuildContext(
            directory=context.directory.resolve(),
            dockerfile=context.dockerfile.resolve() if context.dockerfile else None,
        )
        result = run_streaming(
            build_command(resolved, local_tag, docker=self._docker),
            cwd=resolved.directory,
        )
        if isinstance(result, Err):
            error = result.error
            return Err(
                BuildError(local_tag=local_tag, returncode=error.returncode, detail=error.output)
            )
        return Ok(None)

"""Release failure presentation.

Centralized diagnostics and exit code mapping for ``ship release``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ship.core.errors import ErrorCode
from ship.output.console import Style
from ship.release.errors import (
    AuthError,
    BuildError,
    Cancelled,
    DescriptorWriteError,
    DockerMissing,
    ImageNotFound,
    InvalidReference,
    NetworkError,
    PushAuthError,
    RegistryRejected,
    StepError,
    TagFailed,
)

if TYPE_CHECKING:
    from ship.output.console import ConsoleProtocol
    from ship.release.pipeline import ReleaseFailure

__all__ = ["print_release_failure", "release_failure_exit_code", "step_error_exit_code"]


def print_release_failure(failure: ReleaseFailure, console: ConsoleProtocol) -> None:
    """Name the failed step and error class, then say what reached the registry."""
    error = failure.error
    if failure.is_degraded:
        console.error(
            f"{failure.step} failed ({error.label}): {error.message}; "
            "images WERE published to the registry"
        )
    else:
        console.error(f"{failure.step} failed ({error.label}): {error.message}")

    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)

    if failure.remote_mutated:
        console.warning("remote artifacts published by this run:")
        for ref in failure.published:
            console.print(f"  {ref.uri}", Style.DIM)
        if failure.is_degraded:
            console.print(
                f"Rerun `ship release` or write {failure.plan.descriptor_path} by hand:",
                Style.DIM,
            )
            for key, value in failure.plan.descriptor.as_pairs():
                console.print(f"  {key}={value}", Style.DIM)
        else:
            console.print("Rerun `ship release` to publish a consistent latest tag.", Style.DIM)
    else:
        console.print("No remote state was changed; safe to rerun.", Style.DIM)


def step_error_exit_code(error: StepError) -> int:
    match error:
        case AuthError() | PushAuthError():
            return int(ErrorCode.AUTH_ERROR)
        case BuildError():
            return int(ErrorCode.BUILD_ERROR)
        case DockerMissing():
            return int(ErrorCode.ENV_ERROR)
        case ImageNotFound() | InvalidReference() | TagFailed() | RegistryRejected():
            return int(ErrorCode.REGISTRY_ERROR)
        case NetworkError():
            return int(ErrorCode.NETWORK_ERROR)
        case DescriptorWriteError():
            return int(ErrorCode.IO_ERROR)
        case Cancelled():
            return int(ErrorCode.CANCELLED)
    return int(ErrorCode.USER_ERROR)


def release_failure_exit_code(failure: ReleaseFailure) -> int:
    if failure.is_degraded:
        return int(ErrorCode.DEGRADED)
    return step_error_exit_code(failure.error)

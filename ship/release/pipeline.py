"""Release pipeline.

One run walks a fixed sequence of states:

    INIT -> AUTHENTICATED -> BUILT -> TAGGED -> PUSHED -> DESCRIPTOR_WRITTEN

The first failing step ends the run in ABORTED. A descriptor write failure
after both pushes ends it in DEGRADED instead: the images are published but
no local record exists. Nothing is retried or rolled back; a partially
tagged or partially pushed release is left as is and fixed by rerunning.
Every run starts from INIT with a fresh version.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.release.builder import ImageBuilder, build_command
from ship.release.descriptor import (
    DeploymentDescriptor,
    DeploymentDescriptorWriter,
    DescriptorWriter,
)
from ship.release.errors import Cancelled, DescriptorWriteError, StepError
from ship.release.hooks import HookError, run_hooks
from ship.release.reference import BuildContext, ImageReference, release_references
from ship.release.registry import RegistryClient
from ship.release.version import VersionStamper

__all__ = [
    "PipelineState",
    "Step",
    "ReleasePlan",
    "ReleaseReport",
    "ReleaseFailure",
    "ReleasePipeline",
    "print_plan",
]


class PipelineState(StrEnum):
    INIT = "init"
    AUTHENTICATED = "authenticated"
    BUILT = "built"
    TAGGED = "tagged"
    PUSHED = "pushed"
    DESCRIPTOR_WRITTEN = "descriptor written"
    ABORTED = "aborted"
    DEGRADED = "degraded"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PipelineState.DESCRIPTOR_WRITTEN,
            PipelineState.ABORTED,
            PipelineState.DEGRADED,
        )


class Step(StrEnum):
    PRE_RUN = "pre-run hooks"
    AUTHENTICATE = "authenticate"
    BUILD = "build"
    VERSIONED_TAG = "versioned tag"
    LATEST_TAG = "latest tag"
    VERSIONED_PUSH = "versioned push"
    LATEST_PUSH = "latest push"
    DESCRIPTOR_WRITE = "descriptor write"


# The step attempted when leaving each non-terminal state.
_FIRST_STEP: Mapping[PipelineState, Step] = {
    PipelineState.INIT: Step.AUTHENTICATE,
    PipelineState.AUTHENTICATED: Step.BUILD,
    PipelineState.BUILT: Step.VERSIONED_TAG,
    PipelineState.TAGGED: Step.VERSIONED_PUSH,
    PipelineState.PUSHED: Step.DESCRIPTOR_WRITE,
}


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Everything one run will do, fixed once the version is stamped."""

    version: str
    service_name: str
    local_tag: str
    context: BuildContext
    versioned: ImageReference
    latest: ImageReference
    descriptor_path: Path
    descriptor: DeploymentDescriptor

    @property
    def registry(self) -> str:
        return self.versioned.registry

    @property
    def references(self) -> tuple[ImageReference, ImageReference]:
        return (self.versioned, self.latest)


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    plan: ReleasePlan
    state: PipelineState
    hook_failures: tuple[HookError, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseFailure:
    """Why and where a run stopped.

    ``published`` lists references pushed before the failure. When it is not
    empty the remote registry was changed by this run.
    """

    step: Step
    error: StepError
    state: PipelineState
    plan: ReleasePlan
    published: tuple[ImageReference, ...] = ()
    hook_failures: tuple[HookError, ...] = ()

    @property
    def version(self) -> str:
        return self.plan.version

    @property
    def remote_mutated(self) -> bool:
        return bool(self.published)

    @property
    def is_degraded(self) -> bool:
        return self.state == PipelineState.DEGRADED


HookRunner = Callable[..., list[HookError]]


@dataclass
class _Run:
    plan: ReleasePlan
    published: list[ImageReference] = field(default_factory=list)
    step: Step = Step.AUTHENTICATE


_Transition = Result[PipelineState, tuple[Step, StepError]]


class ReleasePipeline:
    """Authenticate, build, tag, push and record one release."""

    def __init__(
        self,
        *,
        registry_host: str,
        image_name: str,
        context: BuildContext,
        descriptor_path: Path,
        registry: RegistryClient,
        builder: ImageBuilder,
        console: ConsoleProtocol,
        service_name: str | None = None,
        writer: DescriptorWriter | None = None,
        stamper: VersionStamper | None = None,
        pre_run: tuple[str, ...] = (),
        post_run: tuple[str, ...] = (),
        hook_runner: HookRunner = run_hooks,
    ) -> None:
        self._registry_host = registry_host
        self._image_name = image_name
        self._service_name = service_name or image_name
        self._context = context
        self._descriptor_path = descriptor_path
        self._registry = registry
        self._builder = builder
        self._console = console
        self._writer = writer or DeploymentDescriptorWriter()
        self._stamper = stamper or VersionStamper()
        self._pre_run = pre_run
        self._post_run = post_run
        self._hook_runner = hook_runner
        self._state = PipelineState.INIT
        self._history: list[PipelineState] = [PipelineState.INIT]

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> tuple[PipelineState, ...]:
        """States visited by the last run, in order."""
        return tuple(self._history)

    def plan(self, version: str | None = None) -> ReleasePlan:
        """Stamp a version (unless given) and derive references and descriptor."""
        version = version or self._stamper.next_version()
        versioned, latest = release_references(
            registry=self._registry_host,
            repository=self._image_name,
            version=version,
        )
        return ReleasePlan(
            version=version,
            service_name=self._service_name,
            local_tag=self._image_name,
            context=self._context,
            versioned=versioned,
            latest=latest,
            descriptor_path=self._descriptor_path,
            descriptor=DeploymentDescriptor(
                registry=self._registry_host,
                image_name=self._image_name,
                version=version,
            ),
        )

    def run(self) -> Result[ReleaseReport, ReleaseFailure]:
        self._state = PipelineState.INIT
        self._history = [PipelineState.INIT]
        current = _Run(plan=self.plan())

        hook_failures: list[HookError] = []
        try:
            outcome = self._start(current, hook_failures)
        finally:
            hook_failures += self._finish()

        if isinstance(outcome, Err):
            step, error = outcome.error
            return Err(
                ReleaseFailure(
                    step=step,
                    error=error,
                    state=self._state,
                    plan=current.plan,
                    published=tuple(current.published),
                    hook_failures=tuple(hook_failures),
                )
            )
        return Ok(
            ReleaseReport(plan=current.plan, state=self._state, hook_failures=tuple(hook_failures))
        )

    def _start(
        self, current: _Run, hook_failures: list[HookError]
    ) -> Result[None, tuple[Step, StepError]]:
        try:
            hook_failures += self._run_hooks("pre-run", self._pre_run)
        except KeyboardInterrupt:
            self._enter(PipelineState.ABORTED)
            return Err((Step.PRE_RUN, Cancelled()))
        return self._advance(current)

    def _finish(self) -> list[HookError]:
        # The outcome is already decided; an interrupt here only cuts the hooks short.
        try:
            return self._run_hooks("post-run", self._post_run)
        except KeyboardInterrupt:
            self._console.warning("post-run hooks interrupted")
            return [HookError(phase="post-run", command="", message="interrupted")]

    def _advance(self, current: _Run) -> Result[None, tuple[Step, StepError]]:
        handlers: Mapping[PipelineState, Callable[[_Run], _Transition]] = {
            PipelineState.INIT: self._authenticate,
            PipelineState.AUTHENTICATED: self._build,
            PipelineState.BUILT: self._tag,
            PipelineState.TAGGED: self._push,
            PipelineState.PUSHED: self._write_descriptor,
        }

        while not self._state.is_terminal:
            current.step = _FIRST_STEP[self._state]
            try:
                outcome = handlers[self._state](current)
            except KeyboardInterrupt:
                self._enter(PipelineState.ABORTED)
                return Err((current.step, Cancelled()))

            if isinstance(outcome, Err):
                step, error = outcome.error
                degraded = isinstance(error, DescriptorWriteError)
                self._enter(PipelineState.DEGRADED if degraded else PipelineState.ABORTED)
                return Err((step, error))

            self._enter(outcome.value)

        return Ok(None)

    def _enter(self, state: PipelineState) -> None:
        self._state = state
        self._history.append(state)

    # -- steps -------------------------------------------------------------

    def _authenticate(self, current: _Run) -> _Transition:
        plan = current.plan
        self._console.info(f"Logging into registry {plan.registry}...")
        result = self._registry.authenticate(plan.registry)
        if isinstance(result, Err):
            return Err((Step.AUTHENTICATE, result.error))
        self._console.print(f"Tag = {plan.version}", Style.BOLD)
        return Ok(PipelineState.AUTHENTICATED)

    def _build(self, current: _Run) -> _Transition:
        plan = current.plan
        self._console.step(f"Build: {plan.service_name}")
        result = self._builder.build(plan.context, plan.local_tag)
        if isinstance(result, Err):
            return Err((Step.BUILD, result.error))
        return Ok(PipelineState.BUILT)

    def _tag(self, current: _Run) -> _Transition:
        plan = current.plan
        self._console.print("Tagging:")
        for step, target in ((Step.VERSIONED_TAG, plan.versioned), (Step.LATEST_TAG, plan.latest)):
            current.step = step
            self._console.print(f"  {plan.local_tag} -> {target.uri}", Style.DIM)
            result = self._registry.tag_image(plan.local_tag, target)
            if isinstance(result, Err):
                return Err((step, result.error))
        return Ok(PipelineState.TAGGED)

    def _push(self, current: _Run) -> _Transition:
        plan = current.plan
        for step, target in (
            (Step.VERSIONED_PUSH, plan.versioned),
            (Step.LATEST_PUSH, plan.latest),
        ):
            current.step = step
            self._console.info(f"Pushing {target.uri}")
            result = self._registry.push(target)
            if isinstance(result, Err):
                return Err((step, result.error))
            current.published.append(target)
        return Ok(PipelineState.PUSHED)

    def _write_descriptor(self, current: _Run) -> _Transition:
        plan = current.plan
        result = self._writer.write(plan.descriptor_path, plan.descriptor)
        if isinstance(result, Err):
            return Err((Step.DESCRIPTOR_WRITE, result.error))
        self._console.success(f"Generated {plan.descriptor_path.name}:")
        for key, value in plan.descriptor.as_pairs():
            self._console.print(f"  {key}={value}", Style.DIM)
        return Ok(PipelineState.DESCRIPTOR_WRITTEN)

    def _run_hooks(self, phase: str, commands: tuple[str, ...]) -> list[HookError]:
        if not commands:
            return []
        return self._hook_runner(
            phase,
            commands,
            cwd=self._context.directory,
            console=self._console,
        )


def print_plan(plan: ReleasePlan, console: ConsoleProtocol, *, docker: str = "docker") -> None:
    """Print what a run would do without doing it."""
    console.header(f"Release plan: {plan.service_name} {plan.version}")
    commands = [
        [docker, "login", plan.registry],
        build_command(plan.context, plan.local_tag, docker=docker),
        [docker, "tag", plan.local_tag, plan.versioned.uri],
        [docker, "tag", plan.local_tag, plan.latest.uri],
        [docker, "push", plan.versioned.uri],
        [docker, "push", plan.latest.uri],
    ]
    for cmd in commands:
        console.print(f"  {' '.join(cmd)}", Style.DIM)
    console.print(f"Descriptor ({plan.descriptor_path}):")
    for key, value in plan.descriptor.as_pairs():
        console.print(f"  {key}={value}", Style.DIM)

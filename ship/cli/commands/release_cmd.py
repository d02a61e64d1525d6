"""Release command - build, tag, push and record an image release."""

from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.commands._helpers import exit_on_error, exit_with_code
from ship.cli.context import CLIContext, build_context
from ship.core.result import Err, Ok
from ship.output.console import Style
from ship.output.errors import print_release_failure, release_failure_exit_code
from ship.release.builder import DockerImageBuilder
from ship.release.pipeline import ReleasePipeline, ReleaseReport, print_plan
from ship.release.reference import BuildContext
from ship.release.registry import Credentials, DockerRegistryClient


def release(
    registry: str | None = typer.Option(
        None, "--registry", help="Registry host (overrides [registry] host)", show_default=False
    ),
    image: str | None = typer.Option(
        None, "--image", help="Image repository name, e.g. acme/ip", show_default=False
    ),
    context: Path | None = typer.Option(
        None, "--context", help="Build context directory", show_default=False
    ),
    dockerfile: Path | None = typer.Option(
        None, "--dockerfile", help="Dockerfile path (defaults to <context>/Dockerfile)", show_default=False
    ),
    descriptor: Path | None = typer.Option(
        None, "--descriptor", help="Deployment descriptor path", show_default=False
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to ship.toml (default: search upward)", show_default=False
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan without running it"),
) -> None:
    """Build the image, push <version> and latest tags, write the descriptor."""
    ctx = build_context(config)
    cfg = ctx.config.with_overrides(
        registry=registry,
        image=image,
        context=context,
        dockerfile=dockerfile,
        descriptor=descriptor,
    )
    host = exit_on_error(cfg.require_registry(), ctx)

    pipeline = ReleasePipeline(
        registry_host=host,
        image_name=cfg.image.name,
        service_name=cfg.image.service,
        context=BuildContext(directory=cfg.build.context, dockerfile=cfg.build.dockerfile),
        descriptor_path=cfg.descriptor,
        registry=DockerRegistryClient(
            cwd=ctx.cwd,
            credentials=Credentials.from_env(ctx.environ),
        ),
        builder=DockerImageBuilder(),
        console=ctx.console,
        pre_run=cfg.hooks.pre_run,
        post_run=cfg.hooks.post_run,
    )

    if dry_run:
        print_plan(pipeline.plan(), ctx.console)
        return

    match pipeline.run():
        case Ok(report):
            _print_summary(report, ctx, run_port=cfg.run_port)
        case Err(failure):
            print_release_failure(failure, ctx.console)
            exit_with_code(release_failure_exit_code(failure))


def _print_summary(report: ReleaseReport, ctx: CLIContext, *, run_port: int | None) -> None:
    plan = report.plan
    console = ctx.console
    console.step("Done")
    console.success(f"Image pushed: {plan.versioned.uri}")
    console.print(f"Descriptor: {plan.descriptor_path}", Style.DIM)
    console.print("Use on server:")
    console.print(f"  docker pull {plan.versioned.uri}", Style.DIM)
    if run_port is not None:
        console.print(f"  docker run -p {run_port}:{run_port} {plan.versioned.uri}", Style.DIM)
    else:
        console.print(f"  docker run {plan.versioned.uri}", Style.DIM)

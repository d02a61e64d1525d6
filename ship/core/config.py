"""Typed release configuration.

A release is described by ``ship.toml``:

    [registry]
    host = "registry.example.com"

    [image]
    name = "acme/ip"
    service = "acme-ip-service"

    [build]
    context = "."
    dockerfile = "Dockerfile"

    [descriptor]
    path = "deploy.env"

    [hooks]
    pre_run = ["bash ~/environment/busy.sh"]
    post_run = ["bash ~/environment/free.sh"]

    [run]
    port = 8080

Relative paths are resolved against the directory holding the config file.
Command line options override file values (see ``ReleaseConfig.with_overrides``).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, TomlTable, is_str_dict

__all__ = [
    "CONFIG_FILENAME",
    "CONFIG_ENV_VAR",
    "DEFAULT_IMAGE_NAME",
    "DEFAULT_SERVICE_NAME",
    "DEFAULT_DESCRIPTOR",
    "ConfigError",
    "RegistryConfig",
    "ImageConfig",
    "BuildConfig",
    "HooksConfig",
    "ReleaseConfig",
    "find_config",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "ship.toml"
CONFIG_ENV_VAR = "SHIP_CONFIG"

DEFAULT_IMAGE_NAME = "adatari/ip"
DEFAULT_SERVICE_NAME = "adatari-ip-service"
DEFAULT_DESCRIPTOR = "deploy.env"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    host: str | None = None


@dataclass(frozen=True, slots=True)
class ImageConfig:
    name: str = DEFAULT_IMAGE_NAME
    service: str = DEFAULT_SERVICE_NAME


@dataclass(frozen=True, slots=True)
class BuildConfig:
    context: Path = Path(".")
    dockerfile: Path | None = None


@dataclass(frozen=True, slots=True)
class HooksConfig:
    """Maintenance commands run around a release (best effort)."""

    pre_run: tuple[str, ...] = ()
    post_run: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    descriptor: Path = Path(DEFAULT_DESCRIPTOR)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    run_port: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, base_dir: Path) -> ReleaseConfig:
        """Create a config from parsed TOML, resolving paths against base_dir."""
        root = TomlTable(data)
        image = root.get_table("image")
        build = root.get_table("build")
        hooks = root.get_table("hooks")

        dockerfile = build.get_str("dockerfile")
        return cls(
            registry=RegistryConfig(host=root.get_table("registry").get_str("host")),
            image=ImageConfig(
                name=image.get_str("name") or DEFAULT_IMAGE_NAME,
                service=image.get_str("service") or DEFAULT_SERVICE_NAME,
            ),
            build=BuildConfig(
                context=_resolve(base_dir, build.get_str("context") or "."),
                dockerfile=_resolve(base_dir, dockerfile) if dockerfile else None,
            ),
            descriptor=_resolve(
                base_dir, root.get_table("descriptor").get_str("path") or DEFAULT_DESCRIPTOR
            ),
            hooks=HooksConfig(
                pre_run=hooks.get_str_list("pre_run"),
                post_run=hooks.get_str_list("post_run"),
            ),
            run_port=root.get_table("run").get_int("port"),
        )

    def with_overrides(
        self,
        *,
        registry: str | None = None,
        image: str | None = None,
        context: Path | None = None,
        dockerfile: Path | None = None,
        descriptor: Path | None = None,
    ) -> ReleaseConfig:
        """Return a copy with command line values applied on top."""
        out = self
        if registry is not None:
            out = replace(out, registry=RegistryConfig(host=registry.strip() or None))
        if image is not None:
            out = replace(out, image=replace(out.image, name=image))
        if context is not None:
            out = replace(out, build=replace(out.build, context=context))
        if dockerfile is not None:
            out = replace(out, build=replace(out.build, dockerfile=dockerfile))
        if descriptor is not None:
            out = replace(out, descriptor=descriptor)
        return out

    def require_registry(self) -> Result[str, ConfigError]:
        if self.registry.host is None:
            return Err(
                ConfigError(
                    "registry host is not configured",
                    hint=f"Set [registry] host in {CONFIG_FILENAME} or pass --registry",
                )
            )
        return Ok(self.registry.host)


def _resolve(base_dir: Path, value: str) -> Path:
    p = Path(value).expanduser()
    if p.is_absolute():
        return p
    return base_dir / p


def find_config(start: Path, environ: Mapping[str, str] | None = None) -> Path | None:
    """Locate ship.toml.

    ``SHIP_CONFIG`` wins when set; otherwise search ``start`` and its parents.
    """
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()

    for parent in (start, *start.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    try:
        data: object = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    if not is_str_dict(data):
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load ``ship.toml``; relative paths in it resolve against its directory."""
    return _parse_toml(path).map(lambda data: ReleaseConfig.from_dict(data, base_dir=path.parent))


def load_config_or_default(
    path: Path | None, *, base_dir: Path
) -> Result[ReleaseConfig, ConfigError]:
    """Load config when a file was found, else defaults rooted at base_dir."""
    if path is None:
        return Ok(ReleaseConfig.from_dict({}, base_dir=base_dir))
    return load_config(path)

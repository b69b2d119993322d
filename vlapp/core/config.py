"""Typed configuration loading and access.

Two sources feed the plugin:

- ``vlapp.toml`` (optional) at the project root: plugin settings such as the
  version file location, the CI environment markers, and the build constants
  checked for staging URLs.
- Build flags: ``gradle.properties`` then ``local.properties`` in the project
  root, then ``-P key=value`` overrides. A flag is set when its key is present,
  whatever its value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .properties import load_properties
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_tuple, get_table, str_values

__all__ = [
    "APK_PATH",
    "CHANGELOG_SINCE",
    "CONFIG_FILE_NAME",
    "DEV_BUILD",
    "IGNORE_CHECKS",
    "BuildFlags",
    "Config",
    "ConfigError",
    "ModulesConfig",
    "PathsConfig",
    "VerifyConfig",
    "load_config",
    "load_config_or_default",
    "load_flags",
    "parse_flag_overrides",
]

CONFIG_FILE_NAME = "vlapp.toml"

# Flag names read from the property sources
IGNORE_CHECKS = "ignoreChecks"
DEV_BUILD = "devBuild"
# reserved: accepted but has no effect yet
APK_PATH = "apkPath"
CHANGELOG_SINCE = "changelogSince"

_FLAG_FILES = ("gradle.properties", "local.properties")

DEFAULT_BUILD_SERVER_ENV = ("JENKINS_URL", "BUILD_NUMBER")
DEFAULT_STAGE_MARKER = "stage"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths relative to the project root."""

    version_file: str = "version.properties"
    build_file: str = "app/build.gradle"
    changelog_dir: str = "build/changelog"


@dataclass(frozen=True, slots=True)
class VerifyConfig:
    """Settings for the verification tasks.

    Attributes:
        build_server_env: Environment variables, any of which marks a CI build
        stage_marker: Substring that identifies a staging endpoint
    """

    build_server_env: tuple[str, ...] = DEFAULT_BUILD_SERVER_ENV
    stage_marker: str = DEFAULT_STAGE_MARKER


@dataclass(frozen=True, slots=True)
class ModulesConfig:
    """Coordinates used by the add-module tasks."""

    group: str = "com.visiolink.app"
    version: str = "+"


def _empty_constants() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    verify: VerifyConfig = field(default_factory=VerifyConfig)
    modules: ModulesConfig = field(default_factory=ModulesConfig)
    constants: dict[str, str] = field(default_factory=_empty_constants)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        paths: StrDict = get_table(data, "paths") or {}
        verify: StrDict = get_table(data, "verify") or {}
        modules: StrDict = get_table(data, "modules") or {}
        constants: StrDict = get_table(data, "constants") or {}

        build_server_env = get_str_tuple(verify, "build_server_env")

        return cls(
            paths=PathsConfig(
                version_file=get_str(paths, "version_file") or "version.properties",
                build_file=get_str(paths, "build_file") or "app/build.gradle",
                changelog_dir=get_str(paths, "changelog_dir") or "build/changelog",
            ),
            verify=VerifyConfig(
                build_server_env=build_server_env or DEFAULT_BUILD_SERVER_ENV,
                stage_marker=get_str(verify, "stage_marker") or DEFAULT_STAGE_MARKER,
            ),
            modules=ModulesConfig(
                group=get_str(modules, "group") or "com.visiolink.app",
                version=get_str(modules, "version") or "+",
            ),
            constants=str_values(constants),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to vlapp.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or the defaults when the file doesn't exist.

    A file that exists but is broken is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


@dataclass(frozen=True, slots=True)
class BuildFlags:
    """Build flags from the property sources, later sources winning."""

    values: Mapping[str, str] = field(default_factory=dict)

    def is_set(self, name: str) -> bool:
        return name in self.values

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    @property
    def ignore_checks(self) -> bool:
        return self.is_set(IGNORE_CHECKS)

    @property
    def dev_build(self) -> bool:
        return self.is_set(DEV_BUILD)


def parse_flag_overrides(items: list[str]) -> Result[dict[str, str], ConfigError]:
    """Parse ``-P`` arguments: ``key=value`` or a bare ``key`` (empty value)."""
    out: dict[str, str] = {}
    for item in items:
        key, _, value = item.partition("=")
        key = key.strip()
        if not key:
            return Err(
                ConfigError(
                    f"invalid property override: {item!r}",
                    hint="Use -P key=value or -P key",
                )
            )
        out[key] = value.strip()
    return Ok(out)


def load_flags(
    project_root: Path,
    overrides: Mapping[str, str] | None = None,
) -> Result[BuildFlags, ConfigError]:
    """Collect build flags for ``project_root``.

    Missing property files are skipped; unreadable ones are an error.
    """
    values: dict[str, str] = {}
    for name in _FLAG_FILES:
        path = project_root / name
        if not path.exists():
            continue
        loaded = load_properties(path)
        if isinstance(loaded, Err):
            return Err(ConfigError(loaded.error.message, path=path))
        values.update(loaded.value)

    if overrides:
        values.update(overrides)
    return Ok(BuildFlags(values=values))

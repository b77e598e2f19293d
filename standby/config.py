"""Waiter configuration and TOML-based named profiles.

Loads ~/.standby/defaults.toml (global) and standby.toml (project),
merges them, and resolves named ``[waiters.<name>]`` tables into
WaiterConfig instances.

Example standby.toml:

    [waiters.drg]
    max_elapsed = 600
    succeed_on_not_found = true

    [waiters.drg.backoff]
    base_delay = 2.0
    max_delay = 20.0
"""

from __future__ import annotations

import math
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from standby.core.exceptions import ConfigurationError, ProbeTransportError

type RawConfig = dict[str, Any]

GLOBAL_CONFIG_PATH = Path.home() / ".standby" / "defaults.toml"
PROJECT_CONFIG_NAME = "standby.toml"

DEFAULT_TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    ProbeTransportError,
    ConnectionError,
    TimeoutError,
)


@dataclass(frozen=True, slots=True)
class BackoffSpec:
    """Exponential backoff parameters for lifecycle polling.

    Attributes:
        base_delay: Delay in seconds before the first retry.
        multiplier: Growth factor applied per attempt.
        max_delay: Cap in seconds; no delay ever exceeds it.
        jitter: Fraction in [0, 1]; delays are scaled by a random factor
            in [1 - jitter, 1 + jitter] before capping.
        immediate_first_retry: Re-probe once without delay before backing off.
    """

    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.0
    immediate_first_retry: bool = False

    def __post_init__(self) -> None:
        if not math.isfinite(self.base_delay) or self.base_delay <= 0:
            raise ConfigurationError(f"base_delay must be positive, got {self.base_delay}")
        if not math.isfinite(self.multiplier) or self.multiplier < 1:
            raise ConfigurationError(f"multiplier must be >= 1, got {self.multiplier}")
        if not math.isfinite(self.max_delay) or self.max_delay < self.base_delay:
            raise ConfigurationError(
                f"max_delay ({self.max_delay}) must be >= base_delay ({self.base_delay})"
            )
        if not 0 <= self.jitter <= 1:
            raise ConfigurationError(f"jitter must be within [0, 1], got {self.jitter}")


@dataclass(frozen=True, slots=True)
class WaiterConfig:
    """Immutable limits and retry settings for one waiter.

    At least one of max_attempts and max_elapsed must be set.

    Attributes:
        backoff: Lifecycle polling backoff.
        max_attempts: Maximum number of probes.
        max_elapsed: Maximum wall-clock seconds since the wait started.
        probe_retries: Extra attempts per probe on transient errors.
        probe_retry_delay: Initial delay between transient retries.
        probe_retry_max_delay: Cap for the transient retry delay.
        transient_errors: Exception types treated as transient probe failures.
        succeed_on_not_found: Treat ResourceNotFoundError as success
            (waiting for deletion).
    """

    backoff: BackoffSpec = field(default_factory=BackoffSpec)
    max_attempts: int | None = None
    max_elapsed: float | None = 1200.0
    probe_retries: int = 3
    probe_retry_delay: float = 0.5
    probe_retry_max_delay: float = 5.0
    transient_errors: tuple[type[Exception], ...] = DEFAULT_TRANSIENT_ERRORS
    succeed_on_not_found: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts is None and self.max_elapsed is None:
            raise ConfigurationError("Either max_attempts or max_elapsed must be set")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.max_elapsed is not None and not self.max_elapsed > 0:
            raise ConfigurationError(f"max_elapsed must be positive, got {self.max_elapsed}")
        if self.probe_retries < 0:
            raise ConfigurationError(f"probe_retries must be >= 0, got {self.probe_retries}")
        if self.probe_retry_delay < 0 or self.probe_retry_max_delay < self.probe_retry_delay:
            raise ConfigurationError(
                "probe_retry_delay must be >= 0 and <= probe_retry_max_delay"
            )


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> RawConfig:
    global_cfg = _read_toml(global_path or GLOBAL_CONFIG_PATH)
    project_path = (project_dir or Path.cwd()) / PROJECT_CONFIG_NAME
    project_cfg = _read_toml(project_path)

    merged = _deep_merge(global_cfg, project_cfg)
    merged.setdefault("waiters", {})
    return merged


def _check_keys(name: str, raw: RawConfig, allowed: set[str]) -> None:
    unknown = set(raw) - allowed
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in '{name}': {', '.join(sorted(unknown))}. "
            f"Valid: {', '.join(sorted(allowed))}"
        )


def _build_backoff(name: str, raw: RawConfig) -> BackoffSpec:
    _check_keys(f"{name}.backoff", raw, {f.name for f in fields(BackoffSpec)})
    return BackoffSpec(**raw)


def build_config(name: str, raw: RawConfig) -> WaiterConfig:
    raw = dict(raw)
    raw_backoff = raw.pop("backoff", None)
    allowed = {f.name for f in fields(WaiterConfig)} - {"backoff", "transient_errors"}
    _check_keys(name, raw, allowed)

    backoff = _build_backoff(name, raw_backoff) if raw_backoff else BackoffSpec()
    return WaiterConfig(backoff=backoff, **raw)


def resolve_config(
    name: str,
    *,
    project_dir: Path | None = None,
    global_path: Path | None = None,
) -> WaiterConfig:
    config = load_config(project_dir=project_dir, global_path=global_path)

    waiters = config["waiters"]
    if name not in waiters:
        raise KeyError(f"Waiter '{name}' not found. Available: {', '.join(waiters) or 'none'}")

    return build_config(name, waiters[name])

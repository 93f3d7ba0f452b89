from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


class SettingsError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class EngineSettings:
    # Opt-in guard against authored action cycles; None follows cycles forever.
    max_chain_steps: int | None = None
    # Whole-chain timeout applied by the orchestrator; None means no timeout.
    chain_timeout_s: float | None = None
    # Seed for the default RNG behind `random` conditions.
    rng_seed: int | None = None
    log_level: str = "INFO"


def _optional(env: Mapping[str, str], name: str, cast: type[int] | type[float]) -> int | float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        value = cast(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be a {cast.__name__}, got {raw!r}") from e
    if value < 0:
        raise SettingsError(f"{name} must not be negative")
    return value


def settings_from_env(env: Mapping[str, str] | None = None) -> EngineSettings:
    env = os.environ if env is None else env

    max_steps = _optional(env, "DUNGEON_ENGINE_MAX_CHAIN_STEPS", int)
    timeout = _optional(env, "DUNGEON_ENGINE_CHAIN_TIMEOUT_S", float)
    seed = _optional(env, "DUNGEON_ENGINE_RNG_SEED", int)

    return EngineSettings(
        max_chain_steps=int(max_steps) if max_steps is not None else None,
        chain_timeout_s=float(timeout) if timeout is not None else None,
        rng_seed=int(seed) if seed is not None else None,
        log_level=env.get("DUNGEON_ENGINE_LOG_LEVEL", "INFO").upper(),
    )

"""
Settings - Single source of truth for optimizer configuration.

Usage:
    settings = SolverSettings()
    settings = SolverSettings.from_dict({'annealing_iterations': 5000})
    penalty = settings.conflict_penalty

Every tunable lives in DEFAULTS. Nothing is persisted between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

DEFAULTS = {
    # Objective weights
    "synergy_bonus": 0.15,  # Bonus per jointly selected synergy pair
    "conflict_penalty": 1000.0,  # Per selected conflict pair, effectively forbids
    "required_penalty": 1000.0,  # Per required action left unselected
    "lambda_effort": 10.0,  # Quadratic penalty on effort overrun (minutes)
    "lambda_cash": 15.0,  # Quadratic penalty on upfront cash overrun
    "lambda_buffer": 20.0,  # Quadratic penalty on buffer shortfall
    # Exact enumeration
    "exact_max_actions": 20,  # 2^20 masks is the ceiling for full enumeration
    "exact_chunk_size": 65536,  # Masks scored per vectorized batch
    # Simulated annealing
    "annealing_iterations": 10000,
    "annealing_initial_temperature": 2.0,
    "annealing_cooling_rate": 0.9995,
    "annealing_min_temperature": 1e-6,
    "seed": 0,  # Used when no generator is injected
    # Input limits
    "max_catalog_size": 500,
    # Explainability
    "explain_high_value_threshold": 0.7,  # Unselected actions above this get a skip reason
    "explain_max_reasons": 5,
}


@dataclass(frozen=True)
class SolverSettings:
    """Immutable optimizer configuration, one instance may be shared across calls."""

    synergy_bonus: float = DEFAULTS["synergy_bonus"]
    conflict_penalty: float = DEFAULTS["conflict_penalty"]
    required_penalty: float = DEFAULTS["required_penalty"]
    lambda_effort: float = DEFAULTS["lambda_effort"]
    lambda_cash: float = DEFAULTS["lambda_cash"]
    lambda_buffer: float = DEFAULTS["lambda_buffer"]
    exact_max_actions: int = DEFAULTS["exact_max_actions"]
    exact_chunk_size: int = DEFAULTS["exact_chunk_size"]
    annealing_iterations: int = DEFAULTS["annealing_iterations"]
    annealing_initial_temperature: float = DEFAULTS["annealing_initial_temperature"]
    annealing_cooling_rate: float = DEFAULTS["annealing_cooling_rate"]
    annealing_min_temperature: float = DEFAULTS["annealing_min_temperature"]
    seed: Optional[int] = DEFAULTS["seed"]
    max_catalog_size: int = DEFAULTS["max_catalog_size"]
    explain_high_value_threshold: float = DEFAULTS["explain_high_value_threshold"]
    explain_max_reasons: int = DEFAULTS["explain_max_reasons"]

    def __post_init__(self):
        if self.exact_max_actions < 0 or self.exact_max_actions > 30:
            raise ValueError(f"exact_max_actions must be within 0..30, got {self.exact_max_actions}")
        if self.exact_chunk_size <= 0:
            raise ValueError("exact_chunk_size must be positive")
        if self.annealing_iterations < 0:
            raise ValueError("annealing_iterations must be non-negative")
        if not 0.0 < self.annealing_cooling_rate <= 1.0:
            raise ValueError(f"annealing_cooling_rate must be in (0, 1], got {self.annealing_cooling_rate}")
        if self.annealing_min_temperature <= 0:
            raise ValueError("annealing_min_temperature must be positive")
        if self.annealing_initial_temperature <= 0:
            raise ValueError("annealing_initial_temperature must be positive")
        if self.max_catalog_size <= 0:
            raise ValueError("max_catalog_size must be positive")

    @classmethod
    def from_dict(cls, overrides: dict[str, Any] | None = None) -> "SolverSettings":
        """Build settings from DEFAULTS with overrides applied.

        Raises:
            KeyError: if an override names an unknown setting
        """
        overrides = overrides or {}
        unknown = set(overrides) - set(DEFAULTS)
        if unknown:
            raise KeyError(f"Unknown settings: {', '.join(sorted(unknown))}")
        values = DEFAULTS.copy()
        values.update(overrides)
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> "SolverSettings":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)

    def as_dict(self) -> dict[str, Any]:
        """All settings as a plain dict."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

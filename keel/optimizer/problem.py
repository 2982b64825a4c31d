"""Catalog validation and compilation into index-based arrays for the solvers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from keel.exceptions import CatalogValidationError, RequiredActionError

from .models import ActionRecord, Constraints


def validate_catalog(
    catalog: Sequence[ActionRecord],
    required_ids: Iterable[str] = (),
    max_catalog_size: int | None = None,
) -> None:
    """Reject malformed input before any search starts.

    Raises:
        CatalogValidationError: oversized catalog, duplicate ids, negative
            effort or upfront cost, non-finite numbers, unknown or
            self-referencing conflict/synergy ids
        RequiredActionError: a required id is absent or not eligible
    """
    if max_catalog_size is not None and len(catalog) > max_catalog_size:
        raise CatalogValidationError(
            f"Catalog has {len(catalog)} actions, more than the configured maximum of {max_catalog_size}"
        )

    by_id: dict[str, ActionRecord] = {}
    for action in catalog:
        if action.id in by_id:
            raise CatalogValidationError(f"Duplicate action id '{action.id}'", action_id=action.id)
        by_id[action.id] = action

    for action in catalog:
        if action.effort_minutes < 0:
            raise CatalogValidationError(
                f"Action '{action.id}' has negative effort_minutes ({action.effort_minutes})",
                action_id=action.id,
            )
        if action.upfront_cash_cost < 0:
            raise CatalogValidationError(
                f"Action '{action.id}' has negative upfront_cash_cost ({action.upfront_cash_cost})",
                action_id=action.id,
            )
        numbers = (
            action.effort_minutes,
            action.upfront_cash_cost,
            action.monthly_cashflow_delta,
            action.risk_reduction_score,
        )
        if not all(math.isfinite(x) for x in numbers):
            raise CatalogValidationError(f"Action '{action.id}' has a non-finite attribute", action_id=action.id)

        for relation, ids in (("conflicts_with", action.conflicts_with), ("synergy_with", action.synergy_with)):
            for other in sorted(ids):
                if other == action.id:
                    raise CatalogValidationError(
                        f"Action '{action.id}' lists itself in {relation}", action_id=action.id
                    )
                if other not in by_id:
                    raise CatalogValidationError(
                        f"Action '{action.id}' {relation} unknown action id '{other}'", action_id=other
                    )

    for req_id in required_ids:
        if req_id not in by_id:
            raise RequiredActionError(f"Required action id '{req_id}' is not in the catalog", action_id=req_id)
        if not by_id[req_id].eligible:
            raise RequiredActionError(f"Required action id '{req_id}' is not eligible", action_id=req_id)


def validate_budgets(constraints: Constraints, starting_balance: float) -> None:
    """Reject budgets and balances that would turn every score into NaN.

    Raises:
        CatalogValidationError: a constraint or the starting balance is not finite
    """
    budgets = {
        "max_effort_minutes": constraints.max_effort_minutes,
        "max_upfront_cash": constraints.max_upfront_cash,
        "min_balance_after": constraints.min_balance_after,
        "starting_balance": starting_balance,
    }
    for name, number in budgets.items():
        if not math.isfinite(number):
            raise CatalogValidationError(f"{name} must be finite, got {number}")


def _resolve_pairs(catalog: Sequence[ActionRecord], index: dict[str, int], attr: str) -> np.ndarray:
    """Unordered pairs (i, j) with i < j, each once, from either side's declaration."""
    # A declaration on either action counts, not only the lower-indexed one
    pairs: set[tuple[int, int]] = set()
    for i, action in enumerate(catalog):
        for other in getattr(action, attr):
            j = index.get(other)
            # Ids outside this catalog (e.g. dropped as ineligible) carry no pair
            if j is None or j == i:
                continue
            pairs.add((min(i, j), max(i, j)))
    if not pairs:
        return np.zeros((0, 2), dtype=np.int64)
    return np.array(sorted(pairs), dtype=np.int64)


def _neighbors(n: int, pairs: np.ndarray) -> list[np.ndarray]:
    adjacency: list[list[int]] = [[] for _ in range(n)]
    for i, j in pairs:
        adjacency[int(i)].append(int(j))
        adjacency[int(j)].append(int(i))
    return [np.array(sorted(a), dtype=np.int64) for a in adjacency]


@dataclass(frozen=True)
class ProblemModel:
    """Read-only, index-based view of one optimization call.

    Assignments are numpy int8 vectors of length n in catalog order.
    """

    ids: tuple[str, ...]
    values: np.ndarray
    effort: np.ndarray
    upfront: np.ndarray
    cashflow: np.ndarray
    risk: np.ndarray
    eligible: np.ndarray  # bool
    required: np.ndarray  # bool
    conflict_pairs: np.ndarray  # (p, 2), i < j
    synergy_pairs: np.ndarray  # (q, 2), i < j
    conflict_neighbors: tuple[np.ndarray, ...]
    synergy_neighbors: tuple[np.ndarray, ...]
    constraints: Constraints
    starting_balance: float

    @classmethod
    def compile(
        cls,
        catalog: Sequence[ActionRecord],
        values: np.ndarray,
        constraints: Constraints,
        starting_balance: float,
        required_ids: Iterable[str] = (),
    ) -> "ProblemModel":
        """Resolve string cross references to dense indices once per solve."""
        n = len(catalog)
        if len(values) != n:
            raise ValueError(f"Value vector has {len(values)} entries for {n} actions")

        index = {a.id: i for i, a in enumerate(catalog)}
        required = np.zeros(n, dtype=bool)
        for req_id in required_ids:
            if req_id in index:
                required[index[req_id]] = True

        conflict_pairs = _resolve_pairs(catalog, index, "conflicts_with")
        synergy_pairs = _resolve_pairs(catalog, index, "synergy_with")

        return cls(
            ids=tuple(a.id for a in catalog),
            values=np.asarray(values, dtype=float),
            effort=np.array([a.effort_minutes for a in catalog], dtype=float),
            upfront=np.array([a.upfront_cash_cost for a in catalog], dtype=float),
            cashflow=np.array([a.monthly_cashflow_delta for a in catalog], dtype=float),
            risk=np.array([a.risk_reduction_score for a in catalog], dtype=float),
            eligible=np.array([a.eligible for a in catalog], dtype=bool),
            required=required,
            conflict_pairs=conflict_pairs,
            synergy_pairs=synergy_pairs,
            conflict_neighbors=tuple(_neighbors(n, conflict_pairs)),
            synergy_neighbors=tuple(_neighbors(n, synergy_pairs)),
            constraints=constraints,
            starting_balance=float(starting_balance),
        )

    @property
    def n(self) -> int:
        return len(self.ids)

    def empty_assignment(self) -> np.ndarray:
        return np.zeros(self.n, dtype=np.int8)

    def selected_ids(self, bits: np.ndarray) -> tuple[str, ...]:
        return tuple(self.ids[i] for i in np.flatnonzero(bits))

    def has_conflict(self, bits: np.ndarray) -> bool:
        if len(self.conflict_pairs) == 0:
            return False
        both = bits[self.conflict_pairs[:, 0]] & bits[self.conflict_pairs[:, 1]]
        return bool(np.any(both))

    def mask_to_bits(self, mask: int) -> np.ndarray:
        """Bit i of the mask is action i."""
        return ((mask >> np.arange(self.n, dtype=np.int64)) & 1).astype(np.int8)

    def bits_to_mask(self, bits: np.ndarray) -> int:
        return sum(1 << int(i) for i in np.flatnonzero(bits))

# scriptcost/costs.py
"""
Shared cost data types.

A script's memory cost is assembled from named capabilities.  Each
capability is priced by a :data:`CostValue`, either a fixed amount or a
function of the player's state, looked up in an immutable
:class:`CostCatalog`.  The aggregator (:mod:`scriptcost.aggregator`)
turns a set of referenced names into a :class:`CostResult`.

Cost Variants:
──────────────
  Fixed(amount)        - constant cost
  Dynamic(fn, label)   - ``fn(player) -> number`` evaluated at resolution

Anything else stored in a catalog is "malformed" and is priced at zero by
:func:`evaluate_cost`.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Tuple, Union

__all__ = [
    "PlayerState",
    "UsageKind",
    "UsageEntry",
    "CostResult",
    "Fixed",
    "Dynamic",
    "CostValue",
    "evaluate_cost",
    "sf4_cost",
    "CostCatalog",
    "CostConstants",
    "DEFAULT_CONSTANTS",
    "DEFAULT_NAMESPACE_PRIORITY",
    "BASE_ENTRY_NAME",
]

logger = logging.getLogger(__name__)

#: Anything a :class:`Dynamic` cost function accepts.  Opaque here.
PlayerState = Any

BASE_ENTRY_NAME = "baseCost"

DEFAULT_NAMESPACE_PRIORITY: Tuple[str, ...] = (
    "bladeburner",
    "codingcontract",
    "stanek",
    "gang",
    "sleeve",
    "stock",
    "ui",
)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

class UsageKind(Enum):
    """What kind of capability a usage entry prices."""
    ENGINE = "ns"
    DOM = "dom"
    FUNCTION = "fn"
    BASE = "misc"


@dataclass(frozen=True)
class UsageEntry:
    """One priced line of a cost breakdown."""
    kind: UsageKind
    name: str
    cost: float

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "name": self.name, "cost": self.cost}


@dataclass(frozen=True)
class CostResult:
    """
    Total cost plus its breakdown.

    ``entries`` keeps first-seen order with the base entry first; every
    entry has a positive cost and ``total`` is their sum.
    """
    total: float
    entries: Tuple[UsageEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "cost": self.total,
            "entries": [e.to_dict() for e in self.entries],
        }


# ═══════════════════════════════════════════════════════════════════════════════
# COST VALUES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Fixed:
    amount: float


@dataclass(frozen=True)
class Dynamic:
    """Cost computed from the player state when the name is resolved."""
    fn: Callable[[PlayerState], Any] = field(compare=False)
    label: str = ""

    def __call__(self, player: PlayerState) -> Any:
        return self.fn(player)


CostValue = Union[Fixed, Dynamic]


def _as_cost(value: Any) -> float:
    # bool is a Number subclass but never a cost
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0
    return value


def evaluate_cost(value: Any, player: PlayerState) -> float:
    """
    Price a catalog value for *player*.

    ``Fixed`` yields its amount, ``Dynamic`` yields ``fn(player)``; any
    other value, and any non-numeric result, yields ``0``.  Exceptions
    raised inside a ``Dynamic`` function are not caught.
    """
    if isinstance(value, Fixed):
        return _as_cost(value.amount)
    if isinstance(value, Dynamic):
        return _as_cost(value(player))
    if value is not None:
        logger.debug("malformed cost value %r priced at 0", value)
    return 0


def _source_file_level(player: PlayerState, number: int) -> int:
    lookup = getattr(player, "source_file_level", None)
    if callable(lookup):
        return lookup(number)
    return 0


def sf4_cost(base: float) -> Dynamic:
    """
    Cost that shrinks as the player gains levels in source file 4.

    Inside bitnode 4 the cost is *base*; elsewhere it is multiplied by
    16, 4 or 1 for source-file-4 levels ``<= 1``, ``2`` and ``>= 3``.
    """
    def cost(player: PlayerState) -> float:
        if getattr(player, "bitnode", 0) == 4:
            return base
        level = _source_file_level(player, 4)
        if level <= 1:
            return base * 16
        if level == 2:
            return base * 4
        return base

    return Dynamic(cost, label=f"sf4({base})")


# ═══════════════════════════════════════════════════════════════════════════════
# CATALOG
# ═══════════════════════════════════════════════════════════════════════════════

def _freeze(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class CostCatalog:
    """
    Immutable layered name → cost lookup.

    ``namespaces`` are consulted in ``priority`` order (namespaces not in
    the priority list are never consulted), then ``default``.
    """
    default: Mapping[str, Any] = field(default_factory=dict)
    namespaces: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    priority: Tuple[str, ...] = DEFAULT_NAMESPACE_PRIORITY

    def __post_init__(self) -> None:
        object.__setattr__(self, "default", _freeze(self.default))
        object.__setattr__(
            self,
            "namespaces",
            MappingProxyType({k: _freeze(v) for k, v in dict(self.namespaces).items()}),
        )
        object.__setattr__(self, "priority", tuple(self.priority))

    def lookup(self, name: str) -> Optional[Tuple[str, Any]]:
        """
        Resolve *name* to ``(display_name, value)``.

        The first namespace in priority order holding *name* wins and the
        display name becomes ``"<namespace>.<name>"``; otherwise the bare
        name is looked up in the default table.  Returns ``None`` when
        nothing matches.
        """
        for namespace in self.priority:
            table = self.namespaces.get(namespace)
            if table is not None and name in table:
                return f"{namespace}.{name}", table[name]
        if name in self.default:
            return name, self.default[name]
        return None


@dataclass(frozen=True)
class CostConstants:
    """Fixed costs that do not come from the catalog tables."""
    base: float = 1.6
    hacknet: float = 4
    dom: float = 25
    corporation: float = 1024 - 1.6

    def special_costs(self) -> Mapping[str, Tuple[UsageKind, float]]:
        """Names priced before any catalog lookup."""
        return {
            "hacknet": (UsageKind.ENGINE, self.hacknet),
            "document": (UsageKind.DOM, self.dom),
            "window": (UsageKind.DOM, self.dom),
            "corporation": (UsageKind.ENGINE, self.corporation),
        }


DEFAULT_CONSTANTS = CostConstants()


"""scriptcost/catalog.py — cost catalog configuration.

Builds the immutable :class:`~scriptcost.costs.CostCatalog` and
:class:`~scriptcost.costs.CostConstants` from a JSON document, and the
:class:`PlayerSnapshot` handed to dynamic cost functions.

Catalog file format
-------------------
.. code-block:: json

    {
      "default":    {"hack": 0.1, "getServer": 2},
      "namespaces": {"gang": {"recruitMember": 2},
                     "stanek": {"chargeFragment": {"sf4": 0.4}}},
      "priority":   ["bladeburner", "codingcontract", "stanek", "gang",
                     "sleeve", "stock", "ui"],
      "constants":  {"base": 1.6, "dom": 25}
    }

A cost value is a number (``Fixed``) or ``{"sf4": n}`` (scaled by the
player's source-file-4 level).  ``priority`` and ``constants`` are
optional.  Malformed *values* are logged and priced at zero; a malformed
*structure* raises :class:`~scriptcost.errors.CatalogError`.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from scriptcost.costs import (
    DEFAULT_CONSTANTS,
    DEFAULT_NAMESPACE_PRIORITY,
    CostCatalog,
    CostConstants,
    Fixed,
    sf4_cost,
)
from scriptcost.errors import CatalogError, SourceSpan

__all__ = [
    "PlayerSnapshot",
    "parse_cost_value",
    "catalog_from_mapping",
    "load_catalog",
    "parse_source_file_flag",
    "player_from_flags",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Player state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PlayerSnapshot:
    """Read-only view of the player fields cost functions consult."""

    bitnode: int = 1
    source_files: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "source_files",
                           MappingProxyType(dict(self.source_files)))

    def source_file_level(self, number: int) -> int:
        return self.source_files.get(number, 0)


def parse_source_file_flag(text: str) -> Tuple[int, int]:
    """Parse a ``N=LEVEL`` command-line value into ``(N, LEVEL)``."""
    number, sep, level = text.partition("=")
    if not sep:
        raise ValueError(f"expected N=LEVEL, got {text!r}")
    return int(number), int(level)


# ---------------------------------------------------------------------------
# Catalog construction
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def parse_cost_value(raw: Any, where: str = "") -> Any:
    """Convert one JSON cost value into a ``CostValue``.

    Returns ``None`` for malformed values, which the aggregator prices
    at zero.
    """
    if _is_number(raw):
        return Fixed(raw)
    if isinstance(raw, dict) and set(raw) == {"sf4"} and _is_number(raw["sf4"]):
        return sf4_cost(raw["sf4"])
    logger.warning("malformed cost value for %s: %r (priced at 0)", where or "?", raw)
    return None


def _parse_table(raw: Any, label: str, source: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise CatalogError(
            f"{label} must be a JSON object, got {type(raw).__name__}",
            span=SourceSpan(file=source),
        )
    return {
        str(name): parse_cost_value(value, f"{label}.{name}")
        for name, value in raw.items()
    }


def _parse_constants(raw: Any, source: str) -> CostConstants:
    if raw is None:
        return DEFAULT_CONSTANTS
    if not isinstance(raw, dict):
        raise CatalogError("constants must be a JSON object",
                           span=SourceSpan(file=source))
    known = {f.name for f in dataclasses.fields(CostConstants)}
    overrides = {}
    for name, value in raw.items():
        if name not in known:
            raise CatalogError(
                f"unknown cost constant {name!r}",
                span=SourceSpan(file=source),
                hint="known constants: " + ", ".join(sorted(known)),
            )
        if not _is_number(value):
            raise CatalogError(f"cost constant {name!r} must be a number",
                               span=SourceSpan(file=source))
        overrides[name] = value
    return dataclasses.replace(DEFAULT_CONSTANTS, **overrides)


def catalog_from_mapping(
    data: Any,
    source: str = "<catalog>",
) -> Tuple[CostCatalog, CostConstants]:
    """Build ``(catalog, constants)`` from an already-decoded document."""
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a JSON object",
                           span=SourceSpan(file=source))

    default = _parse_table(data.get("default", {}), "default", source)

    raw_namespaces = data.get("namespaces", {})
    if not isinstance(raw_namespaces, dict):
        raise CatalogError("namespaces must be a JSON object",
                           span=SourceSpan(file=source))
    namespaces = {
        str(ns): _parse_table(table, ns, source)
        for ns, table in raw_namespaces.items()
    }

    priority: Sequence[str] = data.get("priority", DEFAULT_NAMESPACE_PRIORITY)
    if not isinstance(priority, (list, tuple)) or not all(
        isinstance(ns, str) for ns in priority
    ):
        raise CatalogError("priority must be a list of namespace names",
                           span=SourceSpan(file=source))
    for ns in namespaces:
        if ns not in priority:
            logger.warning("namespace %r is not in the priority list and "
                           "will never be consulted", ns)

    constants = _parse_constants(data.get("constants"), source)
    catalog = CostCatalog(default=default, namespaces=namespaces,
                          priority=tuple(priority))
    logger.debug("catalog %s: %d default name(s), %d namespace(s)",
                 source, len(default), len(namespaces))
    return catalog, constants


def load_catalog(
    path: Union[str, Path],
) -> Tuple[CostCatalog, CostConstants]:
    """Read a catalog JSON file.

    Raises
    ------
    CatalogError
        The file is unreadable, not JSON, or structurally invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"cannot read catalog: {exc.strerror}",
                           span=SourceSpan(file=str(path)), cause=exc) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(
            f"invalid JSON: {exc.msg}",
            span=SourceSpan(file=str(path), line=exc.lineno, column=exc.colno),
            cause=exc,
        ) from exc
    return catalog_from_mapping(data, source=str(path))


def player_from_flags(
    bitnode: Optional[int],
    source_files: Sequence[str] = (),
) -> PlayerSnapshot:
    """Build a :class:`PlayerSnapshot` from CLI ``--bitnode`` / ``--source-file``."""
    levels: Dict[int, int] = {}
    for text in source_files:
        number, level = parse_source_file_flag(text)
        levels[number] = level
    return PlayerSnapshot(bitnode=bitnode if bitnode is not None else 1,
                          source_files=levels)

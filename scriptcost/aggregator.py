"""scriptcost/aggregator.py — price a set of referenced names.

Given the capability names a script references, :func:`aggregate`
resolves each against the special names, the catalog's namespaces (in
priority order) and its default table, and returns the positive-cost
breakdown with its total.

Example
-------
>>> from scriptcost.costs import CostCatalog, Fixed
>>> catalog = CostCatalog(default={"hack": Fixed(0.1)})
>>> result = aggregate(None, ["hack", "hack", "nope"], catalog)
>>> [e.name for e in result.entries]
['baseCost', 'hack']
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Set

from scriptcost.costs import (
    BASE_ENTRY_NAME,
    DEFAULT_CONSTANTS,
    CostCatalog,
    CostConstants,
    CostResult,
    PlayerState,
    UsageEntry,
    UsageKind,
    evaluate_cost,
)

__all__ = ["aggregate", "resolve_name"]

logger = logging.getLogger(__name__)


def resolve_name(
    player: PlayerState,
    name: str,
    catalog: CostCatalog,
    constants: CostConstants = DEFAULT_CONSTANTS,
) -> UsageEntry:
    """Price a single *name*; unresolved names come back with cost 0."""
    special = constants.special_costs().get(name)
    if special is not None:
        kind, cost = special
        return UsageEntry(kind, name, cost)

    hit = catalog.lookup(name)
    if hit is None:
        logger.debug("unresolved name %r priced at 0", name)
        return UsageEntry(UsageKind.FUNCTION, name, 0)

    display, value = hit
    return UsageEntry(UsageKind.FUNCTION, display, evaluate_cost(value, player))


def aggregate(
    player: PlayerState,
    names: Iterable[str],
    catalog: CostCatalog,
    constants: CostConstants = DEFAULT_CONSTANTS,
) -> CostResult:
    """Compute the cost of a script that references *names*.

    Duplicate names are counted once.  Unknown names and malformed
    catalog values contribute nothing.  ``entries`` keeps first-seen
    order behind the base entry, and only entries with a positive cost
    survive.
    """
    entries: List[UsageEntry] = [
        UsageEntry(UsageKind.BASE, BASE_ENTRY_NAME, constants.base)
    ]
    seen: Set[str] = set()
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        entries.append(resolve_name(player, name, catalog, constants))

    priced = tuple(e for e in entries if e.cost > 0)
    total = sum(e.cost for e in priced)
    logger.debug("aggregated %d name(s) into %d entr(ies), total %s",
                 len(seen), len(priced), total)
    return CostResult(total, priced)

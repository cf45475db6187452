"""scriptcost — static checks for game scripts.

Prices the capabilities a script references (its memory cost) and
rejects ``while (true)`` loops that never ``await``.

Submodules
----------
grammar / parser / ast
    parsimonious PEG front-end producing a frozen-dataclass AST.
visitor
    ``ASTVisitor`` dispatch and tree-walking helpers.
symbols
    Referenced-name extraction across a script and its imports.
costs / catalog
    Cost values, the immutable ``CostCatalog`` and its JSON loader.
aggregator
    ``aggregate`` — names → ``CostResult``.
loops
    ``find_unsafe_loop`` — AST → first unyielding loop.
diagnostics / errors
    Report records and the exception hierarchy.
main
    CLI entry-point with subcommands ``cost``, ``loops``, ``check``,
    ``parse``.

Usage
-----
Command-line::

    python -m scriptcost check hack.js --catalog costs.json

Programmatic::

    from scriptcost import aggregate, check_infinite_loop, load_catalog

    catalog, constants = load_catalog("costs.json")
    result = aggregate(player, ["hack", "grow"], catalog, constants)
    finding = check_infinite_loop(source)
"""

from __future__ import annotations

__version__: str = "0.1.0"

from scriptcost.aggregator import aggregate
from scriptcost.catalog import PlayerSnapshot, load_catalog
from scriptcost.costs import (
    DEFAULT_CONSTANTS,
    CostCatalog,
    CostConstants,
    CostResult,
    Dynamic,
    Fixed,
    UsageEntry,
    UsageKind,
    sf4_cost,
)
from scriptcost.errors import (
    CatalogError,
    ImportResolutionError,
    ScriptCostError,
    ScriptParseError,
)
from scriptcost.loops import LoopFinding, check_infinite_loop, find_unsafe_loop
from scriptcost.parser import parse
from scriptcost.symbols import (
    calculate_ram_usage,
    collect_script_names,
    referenced_names,
)

__all__: list[str] = [
    "__version__",
    "aggregate",
    "PlayerSnapshot",
    "load_catalog",
    "DEFAULT_CONSTANTS",
    "CostCatalog",
    "CostConstants",
    "CostResult",
    "Dynamic",
    "Fixed",
    "UsageEntry",
    "UsageKind",
    "sf4_cost",
    "CatalogError",
    "ImportResolutionError",
    "ScriptCostError",
    "ScriptParseError",
    "LoopFinding",
    "check_infinite_loop",
    "find_unsafe_loop",
    "parse",
    "calculate_ram_usage",
    "collect_script_names",
    "referenced_names",
]

"""scriptcost/symbols.py — which capability names does a script use?

Public API
----------
``referenced_names(program) -> list[str]``
    Distinct identifier and member-property names of one script, in
    first-seen order.
``collect_script_names(filename, scripts) -> list[str]``
    The same across a script and every sibling script it imports,
    transitively.
``calculate_ram_usage(player, filename, scripts, catalog, constants)``
    Extraction followed by :func:`~scriptcost.aggregator.aggregate`.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Mapping, Optional

from scriptcost import ast as A
from scriptcost.aggregator import aggregate
from scriptcost.costs import (
    DEFAULT_CONSTANTS,
    CostCatalog,
    CostConstants,
    CostResult,
    PlayerState,
)
from scriptcost.errors import ImportResolutionError, SourceSpan
from scriptcost.parser import parse
from scriptcost.visitor import iter_nodes, walk

__all__ = [
    "referenced_names",
    "resolve_import",
    "collect_script_names",
    "calculate_ram_usage",
]

logger = logging.getLogger(__name__)


def _name_children(node: A.Node) -> Iterable[A.Node]:
    # Non-computed object-literal keys are labels, not references.
    if isinstance(node, A.Property) and not node.computed:
        return (node.value,)
    return node.children()


def referenced_names(program: A.Node) -> List[str]:
    """Distinct identifier names in document order, each once.

    Non-computed member properties count (``ns.gang.recruitMember``
    yields ``ns``, ``gang`` and ``recruitMember``); non-computed
    object-literal keys do not.
    """
    names: Dict[str, None] = {}
    for node in iter_nodes(program, _name_children):
        if isinstance(node, A.Identifier):
            names.setdefault(node.name, None)
    return list(names)


def resolve_import(
    module: str,
    scripts: Mapping[str, str],
) -> Optional[str]:
    """Map an import specifier to a key of *scripts*.

    Leading ``./`` and ``/`` are dropped and a missing ``.js`` extension
    is tried.  Returns None if nothing matches.
    """
    name = module
    while name.startswith("./") or name.startswith("/"):
        name = name[2:] if name.startswith("./") else name[1:]
    for candidate in (name, name + ".js"):
        if candidate in scripts:
            return candidate
    return None


def collect_script_names(
    filename: str,
    scripts: Mapping[str, str],
) -> List[str]:
    """Names referenced by *filename* and everything it imports.

    *scripts* maps file names to source text.  Each file is parsed once
    even if imported from several places (or cyclically).

    Raises
    ------
    ImportResolutionError
        An import names a script that is not in *scripts*.
    ScriptParseError
        Any of the scripts fails to parse.
    """
    if filename not in scripts:
        raise ImportResolutionError(filename)
    names: Dict[str, None] = {}
    visited = set()
    pending = [filename]
    while pending:
        current = pending.pop(0)
        if current in visited:
            continue
        visited.add(current)
        program = parse(scripts[current], current)
        for name in referenced_names(program):
            names.setdefault(name, None)
        for decl in walk(program, A.ImportDeclaration):
            target = resolve_import(decl.source, scripts)
            if target is None:
                raise ImportResolutionError(
                    decl.source,
                    importer=current,
                    span=SourceSpan(file=current,
                                    line=program.line_of(decl.start),
                                    column=program.column_of(decl.start)),
                )
            logger.debug("%s imports %s", current, target)
            pending.append(target)
    return list(names)


def calculate_ram_usage(
    player: PlayerState,
    filename: str,
    scripts: Mapping[str, str],
    catalog: CostCatalog,
    constants: CostConstants = DEFAULT_CONSTANTS,
) -> CostResult:
    """Cost of running *filename*, imports included."""
    return aggregate(player, collect_script_names(filename, scripts),
                     catalog, constants)

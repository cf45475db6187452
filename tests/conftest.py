# tests/conftest.py
"""
Shared fixtures and sample scripts for the scriptcost test-suite.
"""

import json

import pytest

from scriptcost.catalog import PlayerSnapshot
from scriptcost.costs import CostCatalog, Dynamic, Fixed, sf4_cost


# ---------------------------------------------------------------------------
# Sample scripts
# ---------------------------------------------------------------------------

EMPTY_LOOP_JS = "while(true){}"

AWAITING_LOOP_JS = "while(true){ await f(); }"

NESTED_LOOP_JS = "while(true){ if (x) { while(true){} } await f(); }"

FALSE_LOOP_JS = "while(false){}"

HACK_JS = """\
/** @param {NS} ns */
export async function main(ns) {
    const target = ns.args[0];
    while (true) {
        if (ns.getServerSecurityLevel(target) > 5) {
            await ns.weaken(target);
        } else {
            await ns.hack(target);
        }
    }
}
"""

LIB_JS = """\
export function buy(ns) {
    return ns.hacknet.purchaseNode();
}
"""

IMPORTING_JS = """\
import { buy } from "./lib.js";

export async function main(ns) {
    buy(ns);
    await ns.sleep(1000);
}
"""

KITCHEN_SINK_JS = """\
import * as util from "util.js";
import def, { a as b, c } from "/other";

const [x, y, ...rest] = [1, 2, 3];
let { p, q: r = 4, ...others } = obj;
var n = 0x1F, s = 'it\\'s', t = `sum ${x + 1} done`;

function* gen(a, b = 2, ...more) {
    for (let i = 0; i < a; i++) {
        if (i % 2 === 0) continue;
        else break;
    }
    for (const k of more) { n += k; }
    for (const key in obj) { delete obj[key]; }
    do { n--; } while (n > 0);
    try { throw new Error("boom"); } catch (e) { n = e?.message ?? null; } finally { n = !n; }
    return typeof n === "string" ? n : void 0;
}

const f = async (v) => await v;
const g = v => ({ v, [v]: v * 2, m() { return this; } });
util.call?.(x, ...rest);
"""


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def player():
    """A player outside bitnode 4 with no source files."""
    return PlayerSnapshot(bitnode=1)


@pytest.fixture
def catalog():
    """A small catalog exercising every resolution path."""
    return CostCatalog(
        default={
            "hack": Fixed(0.1),
            "grow": Fixed(0.15),
            "weaken": Fixed(0.15),
            "getServerSecurityLevel": Fixed(0.1),
            "purchaseNode": Fixed(0),
            "sleep": Fixed(0),
            "getServer": Fixed(2),
            "broken": "not a cost",
            "ownedAugs": sf4_cost(5),
            "threads": Dynamic(lambda p: 3 if p.bitnode == 2 else 1, label="threads"),
        },
        namespaces={
            "gang": {"recruitMember": Fixed(2), "getServer": Fixed(7)},
            "stock": {"getServer": Fixed(9), "buy": Fixed(2.5)},
            "ui": {"getTheme": Fixed(0)},
        },
    )


@pytest.fixture
def catalog_file(tmp_path):
    """A catalog JSON file on disk."""
    path = tmp_path / "costs.json"
    path.write_text(json.dumps({
        "default": {"hack": 0.1, "weaken": 0.15, "getServerSecurityLevel": 0.1,
                    "purchaseNode": 0, "sleep": 0, "getOwnedAugs": {"sf4": 5}},
        "namespaces": {"stock": {"buy": 2.5}},
    }), encoding="utf-8")
    return path

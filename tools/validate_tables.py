from __future__ import annotations
import sys
from offer_core import tables as T
from offer_core.gates import GATES
from offer_core.recommendations import CATEGORY_PRIORITY, FIX_POOLS, RULES

def main() -> int:
    problems = T.audit_tables()

    # every gate and dimension category needs fix text and a catch-all rule
    for category in CATEGORY_PRIORITY:
        if not FIX_POOLS.get(category):
            problems.append(f"FIX_POOLS: no steps for {category}")
        if not any(r.category == category and r.is_default for r in RULES):
            problems.append(f"RULES: no fallback rule for {category}")
    for gate in GATES:
        if gate.category not in CATEGORY_PRIORITY:
            problems.append(f"GATES: {gate.id} maps to unknown category {gate.category}")

    print(f"Enumerations: {len(T.ENUMERATIONS)}  outcomes={len(T.OUTCOME_TO_BUCKET)}  verticals={len(T.VERTICAL_TO_SEGMENT)}")
    print(f"Gates: {sum(g.kind == 'hard' for g in GATES)} hard, {sum(g.kind == 'soft' for g in GATES)} soft")
    if problems:
        for p in problems:
            print("  ✗", p)
        return 1
    print("  ✓ Tables are complete")
    return 0

if __name__ == "__main__":
    sys.exit(main())

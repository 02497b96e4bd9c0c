from __future__ import annotations
import argparse, json, logging, os, sys, datetime
from offer_core import tables as T
from offer_core.config import DEBUG_TRACE
from offer_core.engine import evaluate, to_payload
from offer_core.errors import ValidationError
from offer_core.report_html import export_report_html
from offer_core.types import PRICING_FORM_FIELDS

def ask(prompt: str, options: dict[str, str]) -> str:
    values = list(options)
    print(prompt)
    for i, v in enumerate(values): print(f"  [{i}] {options[v]}")
    while True:
        raw = input("Your choice (index): ").strip()
        if raw.isdigit() and int(raw) < len(values): return values[int(raw)]
        print("Enter a number index.")

def interactive_form() -> dict[str, str]:
    form: dict[str, str] = {}
    form["offer_type"] = ask("Offer type", T.OFFER_TYPES)
    form["promise_outcome"] = ask("Promised outcome", {o: T.OUTCOME_LABELS[o] for o in T.outcomes_for(form["offer_type"])})
    form["icp_industry"] = ask("Buyer industry", T.ICP_INDUSTRIES)
    form["vertical_segment"] = ask("Vertical", {v: T.VERTICAL_LABELS[v] for v in T.verticals_for(form["icp_industry"])})
    form["icp_size"] = ask("Buyer size", T.ICP_SIZES)
    form["icp_maturity"] = ask("Buyer maturity", T.ICP_MATURITIES)
    form["icp_specificity"] = ask("How specific is the target", T.ICP_SPECIFICITIES)
    form["pricing_structure"] = ask("Pricing structure", T.PRICING_STRUCTURES)
    for key in PRICING_FORM_FIELDS[form["pricing_structure"]]:
        options = T.ENUMERATIONS[key]
        if key == "performance_comp_tier":
            options = {c: T.PERFORMANCE_COMP_TIERS[c] for c in T.comp_tiers_for(form["performance_basis"])}
        form[key] = ask(key.replace("_", " ").capitalize(), options)
    form["risk_model"] = ask("Risk / guarantee", T.RISK_MODELS)
    form["fulfillment_complexity"] = ask("Delivery model", T.FULFILLMENT_COMPLEXITIES)
    form["proof_level"] = ask("Proof", T.PROOF_LEVELS)
    return form

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Score an offer from a JSON form file or interactively.")
    ap.add_argument("input", nargs="?", help="JSON file with the diagnostic form (omit for interactive)")
    ap.add_argument("--html", help="Write an HTML report to this path")
    ap.add_argument("--no-recs", action="store_true", help="Skip recommendations")
    args = ap.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if DEBUG_TRACE else logging.INFO, format="[%(levelname)s] %(message)s")

    if args.input:
        with open(args.input, "r", encoding="utf-8") as f: form = json.load(f)
    else:
        form = interactive_form()
    try:
        ev = evaluate(form)
    except ValidationError as exc:
        print(f"Cannot score: {exc.message}. Missing or invalid: {', '.join(exc.fields)}", file=sys.stderr)
        return 2
    out = {"score_result": to_payload(ev.score_result)}
    if not args.no_recs: out["recommendations"] = to_payload(ev.recommendations)
    print(json.dumps(out, indent=2))
    if args.html:
        os.makedirs(os.path.dirname(os.path.abspath(args.html)), exist_ok=True)
        export_report_html({"input": form, "created_at": datetime.datetime.now().isoformat(), **out}, args.html)
        print(f"Report saved to: {args.html}", file=sys.stderr)
    return 0

if __name__ == "__main__": sys.exit(main())

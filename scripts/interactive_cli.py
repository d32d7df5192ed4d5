# /scripts/interactive_cli.py
# Interactive CLI to exercise the OTC-Finder flow end-to-end:
# 1) Type a medication name -> /v1/suggestions (autocomplete preview)
# 2) Pick destination countries -> /v1/search
# 3) Print analogues, confidence, fallback message and disclaimers
#
# Usage:
#   python scripts/interactive_cli.py
#   python scripts/interactive_cli.py --base-url http://127.0.0.1:8000 --api-key $SERVICE_API_KEY
#
# Requires: requests

from __future__ import annotations
import argparse, json, os, sys
from typing import List, Optional

import requests

from clients.otc_finder_client import OtcFinderClient


# -------------------------------
# Rendering helpers
# -------------------------------
def print_result(out: dict) -> None:
    if out.get("status") != "found":
        print(f"\n[!] {out.get('message', 'No medication found')}")
        return
    res = out["result"]
    orig = res["original_medication"]
    print(f"\nOriginal: {orig.get('brand_name') or orig['name']} ({orig['active_ingredient'] or '?'}) [{orig['country']}]")
    print(f"Confidence: {res['confidence']:.2f}   Source: {res.get('api_source')}")
    if res.get("no_analogues_found"):
        print("\n" + (res.get("fallback_message") or "No analogues found."))
    else:
        print("\nAnalogues:")
        for i, a in enumerate(res["analogues"], 1):
            print(f"  {i:>2}) [{a['country']}] {a.get('brand_name') or a['name']} "
                  f"- {a.get('generic_name') or '-'} {a.get('strength') or ''} "
                  f"(conf {a['confidence']:.2f}, {a['match_origin']})")
    print("\nDisclaimers:")
    for w in res.get("warnings", []):
        print(f"  - {w}")


def parse_countries(raw: str) -> List[str]:
    return [c.strip().upper() for c in raw.split(",") if c.strip()]


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="OTC-Finder interactive CLI")
    ap.add_argument("--base-url", default=os.getenv("OTC_FINDER_URL", "http://127.0.0.1:8000"))
    ap.add_argument("--api-key", default=os.getenv("SERVICE_API_KEY", ""))
    ap.add_argument("--json", action="store_true", help="print raw JSON responses")
    args = ap.parse_args(argv)

    cli = OtcFinderClient(args.base_url, args.api_key)
    try:
        print(json.dumps(cli.status()))
    except requests.RequestException as e:
        print(f"[x] service not reachable: {e}", file=sys.stderr)
        return 1

    while True:
        try:
            q = input("\nMedication (empty to quit): ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        if not q:
            return 0

        try:
            sugg = cli.suggestions(q, limit=5)
            if sugg:
                print("Suggestions: " + ", ".join(f"{s['match_text']} [{s['country']}]" for s in sugg))
            dest = parse_countries(input("Destination countries (comma, empty = all others): "))
            out = cli.search(q, destination_countries=dest or None)
        except requests.RequestException as e:
            print(f"[x] request failed: {e}")
            continue

        if args.json:
            print(json.dumps(out, indent=2, ensure_ascii=False))
        else:
            print_result(out)


if __name__ == "__main__":
    sys.exit(main())

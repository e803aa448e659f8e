#!/usr/bin/env python3
"""
Smoke check against a running tracker.

Posts a small pageview -> purchase scenario to /collect and checks that
/api/summary, /api/events, /admin/db-usage and /admin/export-events answer
with the expected shapes. Counters are compared as deltas, so it is safe to
run against a database that already holds events.
"""
from __future__ import annotations

import argparse
import sys
import uuid
from typing import Any, Dict, List

import requests

SUMMARY_KEYS = {
    "totalEvents", "pageviews", "timeonpageEvents", "productViews", "addToCart", "purchases",
    "uniqueSessions", "uniqueVisitors", "newVisitors", "returningVisitors", "devices",
    "crProductToCart", "crCartToPurchase", "crPageviewToPurchase",
    "topPages", "topReferrers", "utmCombos", "activeCarts", "checkoutSteps",
    "productCategories", "gramsViews", "mediaInteractions", "countries", "formStats",
    "jsErrors", "paymentErrors", "perfSummary",
}


def get_json(base_url: str, path: str, timeout: float, **params) -> Any:
    url = base_url.rstrip("/") + path
    r = requests.get(url, params=params, timeout=timeout)
    if r.status_code != 200:
        raise RuntimeError(f"GET {url} failed: {r.status_code} {r.text[:500]}")
    return r.json()


def post_collect(base_url: str, payload: Dict[str, Any], timeout: float) -> None:
    url = base_url.rstrip("/") + "/collect"
    r = requests.post(url, json=payload, timeout=timeout)
    if r.status_code != 200 or r.json() != {"ok": True}:
        raise RuntimeError(f"POST {url} failed: {r.status_code} {r.text[:500]}")


def check_summary(before: Dict[str, Any], after: Dict[str, Any]) -> List[str]:
    errs: List[str] = []

    missing = SUMMARY_KEYS - set(after)
    if missing:
        errs.append(f"summary missing keys: {sorted(missing)}")

    for key in ("pageviews", "purchases"):
        delta = after.get(key, 0) - before.get(key, 0)
        # the window is capped at 500, a full window can drop old events
        if before.get("totalEvents", 0) < 498 and delta != 1:
            errs.append(f"{key} expected +1, got {delta:+d}")

    sources = [r.get("source") for r in after.get("topReferrers", [])]
    if "smoke.example" not in sources and before.get("totalEvents", 0) == 0:
        errs.append(f"topReferrers missing smoke.example: {sources}")

    if after.get("uniqueSessions", 0) < 1:
        errs.append("uniqueSessions must be >= 1")

    return errs


def main() -> int:
    ap = argparse.ArgumentParser(description="Smoke-check a running tracker")
    ap.add_argument("--base-url", default="http://localhost:8000", help="Tracker base URL (default: http://localhost:8000)")
    ap.add_argument("--timeout", type=float, default=10.0, help="Request timeout seconds (default: 10)")
    args = ap.parse_args()

    sid = f"smoke-{uuid.uuid4()}"
    errs: List[str] = []

    try:
        before = get_json(args.base_url, "/api/summary", args.timeout)

        post_collect(args.base_url, {
            "type": "pageview",
            "sessionId": sid,
            "path": "/smoke",
            "referrer": "https://smoke.example/landing",
            "utm_source": "smoke",
        }, args.timeout)
        post_collect(args.base_url, {"type": "purchase", "sessionId": sid}, args.timeout)

        after = get_json(args.base_url, "/api/summary", args.timeout)
        errs.extend(check_summary(before, after))

        events = get_json(args.base_url, "/api/events", args.timeout, limit=2)
        if [e.get("payload", {}).get("sessionId") for e in events] != [sid, sid]:
            errs.append("latest events are not the smoke events")

        usage = get_json(args.base_url, "/admin/db-usage", args.timeout)
        if not usage.get("ok") or usage.get("usedBytes", 0) <= 0:
            errs.append(f"db-usage unexpected: {usage}")

        url = args.base_url.rstrip("/") + "/admin/export-events"
        r = requests.get(url, params={"days": 1}, timeout=args.timeout)
        if not r.headers.get("content-type", "").startswith("text/csv") or sid not in r.text:
            errs.append("export does not contain the smoke session")
    except Exception as e:
        errs.append(f"request/error: {e}")

    if errs:
        print("[FAIL] smoke")
        for e in errs:
            print(f"  - {e}")
        return 1

    print("[PASS] smoke")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

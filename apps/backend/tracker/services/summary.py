"""
Dashboard summary over the most recent events.

One pass over the stored payloads, tallying funnel counters, visitor/session
sets, device buckets and the per-block frequency maps the dashboard renders.
Derived values (conversion rates, top-5 lists, active carts, perf averages)
are computed afterwards.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlsplit

from tracker.schemas.events import PerfSummary, SummaryOut, TopPage, TopReferrer, UtmCombo

TOP_N = 5

DEVICE_BUCKETS = ("desktop", "mobile", "tablet")
CHECKOUT_STEPS = ("cart", "checkout", "shipping", "payment", "thankyou")
PAYMENT_ERROR_MARKERS = ("payment", "stripe", "paypal")

DIRECT_REFERRER = "Direct / none"
NO_UTM = "(none)"

# schemes a URL parser refuses without a host ("https://", "http:")
HOST_SCHEMES = ("http", "https", "ftp", "ws", "wss")

FUNNEL_COUNTERS = {
    "pageview": "pageviews",
    "timeonpage": "timeonpage_events",
    "view_product": "product_views",
    "add_to_cart": "add_to_cart",
    "purchase": "purchases",
}


def referrer_key(referrer: str) -> str:
    """Group referrers by hostname; anything that isn't an absolute URL is kept as-is."""
    if not referrer:
        return DIRECT_REFERRER
    try:
        parts = urlsplit(referrer)
        if not parts.scheme:
            return referrer
        if parts.scheme.lower() in HOST_SCHEMES and not parts.hostname:
            return referrer
        return parts.hostname or ""
    except ValueError:
        return referrer


def _text(v: Any) -> str:
    return "" if v is None else str(v)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _grams_key(grams: Any) -> str:
    # 250.0 and 250 are the same pack size
    if isinstance(grams, float) and grams.is_integer():
        return str(int(grams))
    return str(grams)


def _rate(num: int, den: int) -> float:
    return (num / den) * 100 if den > 0 else 0


def _avg(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def summarize(payloads: Iterable[Any]) -> SummaryOut:
    payloads = list(payloads)

    funnel = dict.fromkeys(FUNNEL_COUNTERS.values(), 0)
    sessions = set()
    visitors = set()
    new_visitors = 0
    returning_visitors = 0
    devices = {"desktop": 0, "mobile": 0, "tablet": 0, "other": 0}

    top_pages: Counter = Counter()
    referrers: Counter = Counter()
    utm_combos: Counter = Counter()
    checkout_steps = dict.fromkeys(CHECKOUT_STEPS, 0)
    carts_by_visitor: Dict[str, list] = {}
    product_categories: Counter = Counter()
    grams_views: Counter = Counter()
    media_interactions: Counter = Counter()
    countries: Counter = Counter()
    form_stats: Counter = Counter()
    js_errors = 0
    payment_errors = 0
    perf_samples: List[Dict[str, Optional[float]]] = []

    product_view_seen = set()

    for raw in payloads:
        p = raw if isinstance(raw, dict) else {}
        ev_type = p.get("type") if isinstance(p.get("type"), str) else None
        session_id = _text(p.get("sessionId") or None)
        visitor_id = _text(p.get("visitorId") or None)
        path = _text(p.get("path") or p.get("url") or None)
        device = p.get("deviceType") or "other"

        if session_id:
            sessions.add(session_id)
        if visitor_id:
            visitors.add(visitor_id)

        if device in DEVICE_BUCKETS:
            devices[device] += 1
        else:
            devices["other"] += 1

        if path:
            top_pages[path] += 1

        if ev_type in FUNNEL_COUNTERS:
            funnel[FUNNEL_COUNTERS[ev_type]] += 1

        if ev_type == "pageview":
            if p.get("isNewVisitor") is True:
                new_visitors += 1
            else:
                returning_visitors += 1

            referrers[referrer_key(_text(p.get("referrer") or None))] += 1

            combo = (
                _text(p.get("utm_source") or NO_UTM),
                _text(p.get("utm_medium") or NO_UTM),
                _text(p.get("utm_campaign") or NO_UTM),
            )
            utm_combos[combo] += 1

        elif ev_type == "checkout_step":
            # steps outside the fixed funnel are dropped
            step = _text(p.get("step") or "checkout")
            if step in checkout_steps:
                checkout_steps[step] += 1

        elif ev_type == "cart_state":
            if visitor_id:
                items = p.get("items")
                carts_by_visitor[visitor_id] = items if isinstance(items, list) else []

        elif ev_type == "view_product":
            # reloads of the same product page count once
            key = "|".join(
                _text(p.get(field) or None) for field in ("sessionId", "visitorId", "productId")
            ) + "|" + path
            if key not in product_view_seen:
                product_view_seen.add(key)
                if p.get("productCategory"):
                    product_categories[str(p["productCategory"])] += 1
                if p.get("grams") is not None:
                    grams_views[_grams_key(p["grams"])] += 1

        elif ev_type == "media_interaction":
            media_interactions[f"{p.get('mediaType') or 'media'}:{p.get('action') or 'action'}"] += 1

        elif ev_type == "form_interaction":
            form_stats[f"{p.get('formId') or 'generic'}:{p.get('action') or 'submit'}"] += 1

        elif ev_type == "js_error":
            js_errors += 1
            msg = _text(p.get("message") or None).lower()
            if any(marker in msg for marker in PAYMENT_ERROR_MARKERS):
                payment_errors += 1

        elif ev_type == "perf_metric":
            perf_samples.append({
                metric: (p.get(metric) if _is_number(p.get(metric)) else None)
                for metric in ("lcp", "fcp", "ttfb")
            })

        if p.get("country"):
            countries[str(p["country"])] += 1

    perf_summary = PerfSummary()
    if perf_samples:
        perf_summary = PerfSummary(
            avg_lcp=_avg([s["lcp"] for s in perf_samples if s["lcp"] is not None]),
            avg_fcp=_avg([s["fcp"] for s in perf_samples if s["fcp"] is not None]),
            avg_ttfb=_avg([s["ttfb"] for s in perf_samples if s["ttfb"] is not None]),
            samples=len(perf_samples),
        )

    # most_common keeps first-seen order on ties
    return SummaryOut(
        total_events=len(payloads),
        **funnel,
        unique_sessions=len(sessions) or 1,
        unique_visitors=len(visitors),
        new_visitors=new_visitors,
        returning_visitors=returning_visitors,
        devices=devices,
        cr_product_to_cart=_rate(funnel["add_to_cart"], funnel["product_views"]),
        cr_cart_to_purchase=_rate(funnel["purchases"], funnel["add_to_cart"]),
        cr_pageview_to_purchase=_rate(funnel["purchases"], funnel["pageviews"]),
        top_pages=[TopPage(path=k, count=n) for k, n in top_pages.most_common(TOP_N)],
        top_referrers=[TopReferrer(source=k, count=n) for k, n in referrers.most_common(TOP_N)],
        utm_combos=[
            UtmCombo(source=s, medium=m, campaign=c, count=n)
            for (s, m, c), n in utm_combos.most_common(TOP_N)
        ],
        active_carts=sum(1 for items in carts_by_visitor.values() if items),
        checkout_steps=checkout_steps,
        product_categories=dict(product_categories),
        grams_views=dict(grams_views),
        media_interactions=dict(media_interactions),
        countries=dict(countries),
        form_stats=dict(form_stats),
        js_errors=js_errors,
        payment_errors=payment_errors,
        perf_summary=perf_summary,
    )

from __future__ import annotations

from typing import Any, Dict

# Per-type detail fields read by the summary; kept only when the client sends them.
DETAIL_FIELDS = (
    "step",  # checkout_step
    "items",  # cart_state
    "mediaType",  # media_interaction
    "action",  # media_interaction / form_interaction
    "formId",  # form_interaction
    "message",  # js_error
    "lcp",  # perf_metric
    "fcp",
    "ttfb",
)


def normalize_payload(raw: Any) -> Dict[str, Any]:
    """
    Map an arbitrary client payload to the fixed shape we store.

    Never fails: non-dict input is treated as an empty payload, falsy values
    take their default and unknown fields are dropped to keep rows small.
    """
    p = raw if isinstance(raw, dict) else {}

    clean: Dict[str, Any] = {
        "type": p.get("type"),
        "sessionId": p.get("sessionId") or None,
        "visitorId": p.get("visitorId") or None,
        "isNewVisitor": bool(p.get("isNewVisitor")),
        "path": p.get("path") or p.get("url") or "",
        "referrer": p.get("referrer") or "",
        "utm_source": p.get("utm_source") or "",
        "utm_medium": p.get("utm_medium") or "",
        "utm_campaign": p.get("utm_campaign") or "",
        "deviceType": p.get("deviceType") or "other",
        "productId": p.get("productId") or None,
        "productCategory": p.get("productCategory") or None,
        "grams": p.get("grams") or None,
        "country": p.get("country") or None,
    }

    for key in DETAIL_FIELDS:
        if p.get(key) is not None:
            clean[key] = p[key]

    return clean

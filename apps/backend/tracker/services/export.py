from __future__ import annotations

import csv
import io
import json
from typing import Any, Dict, List

from tracker.models.event import Event

EXPORT_COLUMNS = (
    "id",
    "created_at",
    "type",
    "session_id",
    "visitor_id",
    "path",
    "referrer",
    "utm_source",
    "utm_medium",
    "utm_campaign",
)

# export column -> payload key
PAYLOAD_COLUMNS = {
    "type": "type",
    "session_id": "sessionId",
    "visitor_id": "visitorId",
    "path": "path",
    "referrer": "referrer",
    "utm_source": "utm_source",
    "utm_medium": "utm_medium",
    "utm_campaign": "utm_campaign",
}


def _as_text(v: Any):
    if v is None:
        return None
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, (dict, list)):
        # same text as postgres payload->>'col'
        return json.dumps(v, separators=(", ", ": "), ensure_ascii=False)
    return str(v)


def project_event(e: Event) -> Dict[str, Any]:
    p = e.payload if isinstance(e.payload, dict) else {}
    row: Dict[str, Any] = {
        "id": e.id,
        "created_at": e.created_at.isoformat() if e.created_at else None,
    }
    for column, key in PAYLOAD_COLUMNS.items():
        row[column] = _as_text(p.get(key))
    return row


def render_csv(rows: List[Dict[str, Any]]) -> str:
    """
    Header of bare column names, then every value double-quoted with inner
    quotes doubled. None becomes "". No trailing newline.
    """
    header = ",".join(rows[0].keys()) if rows else ""

    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for r in rows:
        writer.writerow(["" if v is None else v for v in r.values()])

    body = out.getvalue()
    if body.endswith("\n"):
        body = body[:-1]
    return header + "\n" + body


def export_filename(days: int) -> str:
    return f"events_export_last_{days}_days.csv"

# apps/backend/tracker/schemas/events.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
  # python side is snake_case, the dashboard reads camelCase
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventOut(CamelModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

  id: int
  created_at: datetime
  payload: Dict[str, Any]


class CollectOut(BaseModel):
  ok: bool = True


class TopPage(CamelModel):
  path: str
  count: int


class TopReferrer(CamelModel):
  source: str
  count: int


class UtmCombo(CamelModel):
  source: str
  medium: str
  campaign: str
  count: int


class PerfSummary(CamelModel):
  avg_lcp: Optional[float] = None
  avg_fcp: Optional[float] = None
  avg_ttfb: Optional[float] = None
  samples: int = 0


class SummaryOut(CamelModel):
  total_events: int

  # funnel
  pageviews: int
  timeonpage_events: int
  product_views: int
  add_to_cart: int
  purchases: int

  # visitors / sessions
  unique_sessions: int
  unique_visitors: int
  new_visitors: int
  returning_visitors: int
  devices: Dict[str, int]

  cr_product_to_cart: float
  cr_cart_to_purchase: float
  cr_pageview_to_purchase: float

  top_pages: List[TopPage]
  top_referrers: List[TopReferrer]
  utm_combos: List[UtmCombo]

  active_carts: int
  checkout_steps: Dict[str, int]
  product_categories: Dict[str, int]
  grams_views: Dict[str, int]
  media_interactions: Dict[str, int]
  countries: Dict[str, int]
  form_stats: Dict[str, int]
  js_errors: int
  payment_errors: int
  perf_summary: PerfSummary


class DbUsageOut(CamelModel):
  ok: bool = True
  used_bytes: int
  used_mb: float = Field(alias="usedMB")
  used_percent: float

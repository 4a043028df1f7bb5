"""
Prop board query: live odds joined with their analytics, filtered and sorted
for display.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.models import LiveOdds, PropAnalytics
from app.repositories import LiveOddsRepository, PropAnalyticsRepository

logger = get_logger(__name__)

ODDS_QUERY_LIMIT = 50
RESULT_LIMIT = 20
POPULAR_CONFIDENCE = 75

SORT_MODES = ("value", "confidence", "edge", "hit_rate", "recent_form")

# category prefix -> sport
CATEGORY_SPORTS = (
    ("wnba-", "WNBA"),
    ("nba-", "NBA"),
    ("nfl-", "NFL"),
    ("mlb-", "MLB"),
    ("nhl-", "NHL"),
)

# (exact sgp category, "-suffix") -> stat type; first match wins
CATEGORY_STATS: Tuple[Tuple[Optional[str], str, str], ...] = (
    ("sgp-points", "-scoring", "Points"),
    ("sgp-rebounds", "-rebounds", "Rebounds"),
    ("sgp-assists", "-assists", "Assists"),
    ("sgp-threes", "-threes", "3-Pointers Made"),
    (None, "-passing", "Passing Yards"),
    (None, "-rushing", "Rushing Yards"),
    (None, "-receiving", "Receiving Yards"),
    (None, "-hits", "Hits"),
    (None, "-goals", "Goals"),
)

_ANALYTICS_SORT_FIELDS = {
    "edge": "edge_percentage",
    "hit_rate": "hit_rate",
    "recent_form": "recent_form",
}


@dataclass
class PropFilters:
    sort_by: str = "value"
    category: str = "all"
    confidence: str = "all"
    sport: str = "all"

    def to_dict(self) -> Dict[str, str]:
        return {
            "sortBy": self.sort_by,
            "category": self.category,
            "confidence": self.confidence,
            "sport": self.sport,
        }


def category_sport(category: str) -> Optional[str]:
    for prefix, sport in CATEGORY_SPORTS:
        if category.startswith(prefix):
            return sport
    return None


def category_stat_type(category: str) -> Optional[str]:
    for exact, suffix, stat_type in CATEGORY_STATS:
        if category == exact or suffix in category:
            return stat_type
    return None


def _min_confidence(value: str) -> Optional[int]:
    if value == "all":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def sort_props(
    rows: List[Tuple[LiveOdds, Optional[PropAnalytics]]],
    sort_by: str
) -> List[Tuple[LiveOdds, Optional[PropAnalytics]]]:
    """Descending by the chosen field; "value" keeps only high-value rows, by confidence."""
    if sort_by == "confidence":
        return sorted(rows, key=lambda r: r[0].confidence_score or 0, reverse=True)
    field = _ANALYTICS_SORT_FIELDS.get(sort_by)
    if field is not None:
        return sorted(rows, key=lambda r: (getattr(r[1], field, None) or 0) if r[1] else 0, reverse=True)
    high_value = [r for r in rows if r[0].value_rating == "high"]
    return sorted(high_value, key=lambda r: r[0].confidence_score or 0, reverse=True)


def format_prop(odds: LiveOdds, analytics: Optional[PropAnalytics]) -> Dict[str, Any]:
    trend = analytics.trend_direction if analytics else None
    recent_form = analytics.recent_form if analytics and analytics.recent_form is not None else 0.0
    return {
        "player": odds.player_name,
        "team": odds.team,
        "stat": odds.stat_type,
        "line": odds.line,
        "overOdds": odds.over_odds,
        "underOdds": odds.under_odds,
        "confidence": odds.confidence_score,
        "valueRating": odds.value_rating or "medium",
        "trend": trend if trend in ("up", "down") else "up",
        "recentForm": f"{recent_form:.1f} avg",
        "seasonAvg": (analytics.season_average if analytics else None) or 0,
        "hitRate": (analytics.hit_rate if analytics else None) or 0,
        "edge": (analytics.edge_percentage if analytics else None) or 0,
        "isPopular": (odds.confidence_score or 0) > POPULAR_CONFIDENCE,
        "sportsbook": odds.sportsbook,
        "lastUpdated": odds.last_updated.isoformat() if odds.last_updated else None,
        "provenance": odds.provenance,
    }


class PropAnalyticsService:

    def __init__(self, db: Session):
        self.db = db

    def query(self, filters: PropFilters) -> Dict[str, Any]:
        """
        Returns:
            {"props": [...], "total": n, "filters": {...}}
        """
        query = LiveOddsRepository(self.db).query()
        if filters.sport != "all":
            query = query.filter(LiveOdds.sport == filters.sport)
        if filters.category != "all":
            sport = category_sport(filters.category)
            if sport:
                query = query.filter(LiveOdds.sport == sport)
            stat_type = category_stat_type(filters.category)
            if stat_type:
                query = query.filter(LiveOdds.stat_type == stat_type)
        min_confidence = _min_confidence(filters.confidence)
        if min_confidence is not None:
            query = query.filter(LiveOdds.confidence_score >= min_confidence)
        odds = query.limit(ODDS_QUERY_LIMIT).all()

        analytics_query = PropAnalyticsRepository(self.db).query()
        if filters.sport != "all":
            analytics_query = analytics_query.filter(PropAnalytics.sport == filters.sport)
        analytics_by_key = {(a.player_name, a.stat_type): a for a in analytics_query.all()}

        joined = [(o, analytics_by_key.get((o.player_name, o.stat_type))) for o in odds]
        props = [format_prop(o, a) for o, a in sort_props(joined, filters.sort_by)[:RESULT_LIMIT]]
        logger.info(f"Prop analytics query {filters.to_dict()} returned {len(props)} props")
        return {"props": props, "total": len(props), "filters": filters.to_dict()}

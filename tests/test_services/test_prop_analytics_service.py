"""Tests for the prop board query.

Test Strategy:
1. Category strings map to a sport and a stat type
2. "value" sorting keeps only high-value props, by confidence
3. Analytics sorts read the joined analytics row
4. Props without analytics render with defaults
"""
import sys
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import add_odds

from app.models.models import PropAnalytics
from app.services.core.prop_analytics_service import (
    PropAnalyticsService,
    PropFilters,
    category_sport,
    category_stat_type,
)


def _analytics(db: Session, player: str, stat_type: str = "Points", sport: str = "NBA", **values) -> None:
    db.add(PropAnalytics(player_name=player, team="Test", sport=sport, stat_type=stat_type, **values))
    db.commit()


class TestCategories:

    @pytest.mark.parametrize("category,sport,stat_type", [
        ("nba-scoring", "NBA", "Points"),
        ("wnba-rebounds", "WNBA", "Rebounds"),
        ("nfl-passing", "NFL", "Passing Yards"),
        ("mlb-hits", "MLB", "Hits"),
        ("nhl-goals", "NHL", "Goals"),
        ("sgp-threes", None, "3-Pointers Made"),
        ("featured", None, None),
    ])
    def test_category_mapping(self, category, sport, stat_type):
        assert category_sport(category) == sport
        assert category_stat_type(category) == stat_type


class TestQuery:

    def test_value_sort_keeps_high_value(self, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings", confidence_score=70, value_rating="high")
        add_odds(db_session, "B", "Points", 20.5, "DraftKings", confidence_score=90, value_rating="medium")
        add_odds(db_session, "C", "Points", 20.5, "DraftKings", confidence_score=85, value_rating="high")

        result = PropAnalyticsService(db_session).query(PropFilters())

        assert [p["player"] for p in result["props"]] == ["C", "A"]
        assert result["total"] == 2
        assert result["filters"] == {"sortBy": "value", "category": "all", "confidence": "all", "sport": "all"}

    def test_sort_by_edge_uses_analytics(self, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings")
        add_odds(db_session, "B", "Points", 20.5, "DraftKings")
        add_odds(db_session, "C", "Points", 20.5, "DraftKings")
        _analytics(db_session, "A", edge_percentage=3.0)
        _analytics(db_session, "B", edge_percentage=11.0)

        props = PropAnalyticsService(db_session).query(PropFilters(sort_by="edge"))["props"]

        assert [p["player"] for p in props] == ["B", "A", "C"]

    def test_filters_by_category_and_confidence(self, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings", confidence_score=80)
        add_odds(db_session, "B", "Rebounds", 8.5, "DraftKings", confidence_score=80)
        add_odds(db_session, "C", "Points", 18.5, "DraftKings", confidence_score=60)
        add_odds(db_session, "D", "Points", 1.5, "DraftKings", sport="NHL", confidence_score=90)

        props = PropAnalyticsService(db_session).query(
            PropFilters(sort_by="confidence", category="nba-scoring", confidence="75")
        )["props"]

        assert [p["player"] for p in props] == ["A"]

    def test_defaults_without_analytics(self, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings", confidence_score=80)

        [prop] = PropAnalyticsService(db_session).query(PropFilters(sort_by="confidence"))["props"]

        assert prop["trend"] == "up"
        assert prop["recentForm"] == "0.0 avg"
        assert prop["hitRate"] == 0
        assert prop["isPopular"] is True
        assert prop["valueRating"] == "medium"

    def test_analytics_fields_render(self, db_session: Session):
        add_odds(db_session, "A", "Points", 20.5, "DraftKings", confidence_score=70)
        _analytics(db_session, "A", recent_form=24.5, hit_rate=60.0, season_average=22.0, trend_direction="down")

        [prop] = PropAnalyticsService(db_session).query(PropFilters(sort_by="hit_rate"))["props"]

        assert prop["recentForm"] == "24.5 avg"
        assert prop["trend"] == "down"
        assert prop["seasonAvg"] == 22.0
        assert prop["isPopular"] is False

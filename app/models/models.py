"""
Database models for the Prop Edge API.

One set of tables serves all five leagues; rows carry a `sport` column.
Upsert conflict keys are declared as UniqueConstraints so that re-running a
fetcher with identical source data never creates duplicate rows.
"""
import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Column, String, Float, Integer, DateTime, Date, ForeignKey, Boolean, Text, JSON,
    Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


class DataProvenance(str, enum.Enum):
    """Where a row came from: a real provider, a fallback path, or a generator."""
    LIVE = "live"
    FALLBACK = "fallback"
    SYNTHETIC = "synthetic"


class LiveOdds(Base):
    """Current player prop line and prices from one sportsbook."""
    __tablename__ = "live_odds"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    player_name = Column(String(255), nullable=False, index=True)
    team = Column(String(100), nullable=False)
    sport = Column(String(10), nullable=True, index=True)
    stat_type = Column(String(100), nullable=False)
    line = Column(Float, nullable=False)
    opening_line = Column(Float, nullable=True)
    line_movement = Column(String(10), nullable=True)  # up, down, stable
    over_odds = Column(String(10), nullable=False)  # American format, e.g. "-110"
    under_odds = Column(String(10), nullable=False)
    sportsbook = Column(String(100), nullable=False)
    confidence_score = Column(Float, nullable=True)  # 0-100
    value_rating = Column(String(10), nullable=True)  # high, medium, low
    data_source = Column(String(50), nullable=True)
    provenance = Column(String(20), nullable=False, default=DataProvenance.LIVE.value)
    last_updated = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("player_name", "stat_type", "sportsbook", name="uq_live_odds_player_stat_book"),
    )


class PlayerStat(Base):
    """One stat value for one player in one game."""
    __tablename__ = "player_stats"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    player_name = Column(String(255), nullable=False, index=True)
    team = Column(String(100), nullable=False)
    sport = Column(String(10), nullable=True, index=True)
    stat_type = Column(String(100), nullable=False)
    value = Column(Float, nullable=False)
    game_date = Column(Date, nullable=False, index=True)
    season_year = Column(Integer, nullable=False)
    opponent_team = Column(String(100), nullable=True)
    home_away = Column(String(4), nullable=True)
    minutes_played = Column(Float, nullable=True)
    source = Column(String(50), nullable=False)
    provenance = Column(String(20), nullable=False, default=DataProvenance.LIVE.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("player_name", "stat_type", "game_date", name="uq_player_stats_player_stat_date"),
        Index("ix_player_stats_lookup", "player_name", "stat_type", "game_date"),
    )


class PlayerMatchup(Base):
    """Head-to-head result for a player against an opponent on one date."""
    __tablename__ = "player_matchups"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    player_name = Column(String(255), nullable=False, index=True)
    player_team = Column(String(100), nullable=False)
    opponent_name = Column(String(255), nullable=False)
    opponent_team = Column(String(100), nullable=False)
    game_date = Column(Date, nullable=False)
    stat_type = Column(String(100), nullable=False)
    player_value = Column(Float, nullable=False)
    opponent_value = Column(Float, nullable=False)
    player_line = Column(Float, nullable=True)
    result = Column(String(10), nullable=True)  # over, under, push
    sport = Column(String(10), nullable=False, default="NBA")
    season_year = Column(Integer, nullable=False)
    data_source = Column(String(50), nullable=True)
    provenance = Column(String(20), nullable=False, default=DataProvenance.LIVE.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint(
            "player_name", "opponent_name", "game_date", "stat_type",
            name="uq_player_matchups_pair_date_stat"
        ),
    )


class PropAnalytics(Base):
    """Derived per-(player, stat type, sport) summary, recomputed on each population run."""
    __tablename__ = "prop_analytics"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    player_name = Column(String(255), nullable=False, index=True)
    team = Column(String(100), nullable=False)
    sport = Column(String(10), nullable=False)
    stat_type = Column(String(100), nullable=False)
    season_average = Column(Float, nullable=True)
    recent_form = Column(Float, nullable=True)
    hit_rate = Column(Float, nullable=True)  # percent of recent games over the line
    edge_percentage = Column(Float, nullable=True)
    trend_direction = Column(String(10), nullable=True)  # up, down, steady
    provenance = Column(String(20), nullable=False, default=DataProvenance.LIVE.value)
    calculated_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        UniqueConstraint("player_name", "stat_type", "sport", name="uq_prop_analytics_player_stat_sport"),
    )


class GameSchedule(Base):
    """Scheduled, live or final game, keyed by game_id."""
    __tablename__ = "games_schedule"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    game_id = Column(String(150), nullable=False, unique=True, index=True)
    external_id = Column(String(100), nullable=True, index=True)  # provider's own id
    sport = Column(String(10), nullable=False, index=True)
    home_team = Column(String(100), nullable=False)
    away_team = Column(String(100), nullable=False)
    home_record = Column(String(20), nullable=True)
    away_record = Column(String(20), nullable=True)
    game_date = Column(Date, nullable=False, index=True)
    game_time = Column(String(20), nullable=False)
    venue = Column(String(150), nullable=True)
    network = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, live, final
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    season_year = Column(Integer, nullable=False)
    week_number = Column(Integer, nullable=True)
    data_source = Column(String(50), nullable=True)
    provenance = Column(String(20), nullable=False, default=DataProvenance.LIVE.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_games_schedule_source_external", "data_source", "external_id"),
    )


class AccessCode(Base):
    """Redeemable code that unlocks the application for a user."""
    __tablename__ = "access_codes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    code = Column(String(50), nullable=False, unique=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    max_uses = Column(Integer, nullable=True)
    current_uses = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class UserAccess(Base):
    """Grant of access to a user through a redeemed code."""
    __tablename__ = "user_access"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    access_code_id = Column(String(36), ForeignKey("access_codes.id", ondelete="CASCADE"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    activated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    access_code = relationship("AccessCode")

    __table_args__ = (
        UniqueConstraint("user_id", "access_code_id", name="uq_user_access_user_code"),
    )


class Profile(Base):
    """User profile; id is the user id."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    display_name = Column(String(100), nullable=True)
    preferred_sportsbook = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class Parlay(Base):
    """A saved bet slip."""
    __tablename__ = "parlays"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    game_info = Column(JSON, nullable=False, default=dict)
    total_picks = Column(Integer, nullable=False, default=0)
    average_confidence = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    picks = relationship("ParlayPick", back_populates="parlay", cascade="all, delete-orphan")


class ParlayPick(Base):
    """One leg of a saved parlay."""
    __tablename__ = "parlay_picks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    parlay_id = Column(String(36), ForeignKey("parlays.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    player_name = Column(String(255), nullable=False)
    prop_type = Column(String(100), nullable=False)
    line = Column(Float, nullable=False)
    bet_type = Column(String(10), nullable=False)  # over, under
    odds = Column(String(10), nullable=False)
    confidence = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    parlay = relationship("Parlay", back_populates="picks")


def model_to_dict(instance) -> dict:
    """Column values of a row as a JSON-ready dict (dates as ISO strings)."""
    result = {}
    for column in instance.__table__.columns:
        value = getattr(instance, column.name)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        result[column.name] = value
    return result

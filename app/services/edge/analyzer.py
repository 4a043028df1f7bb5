"""
Edge opportunity analyzer.

Reads the most recent odds, analytics, stats and schedule rows and runs five
independent heuristics over them, one per strategy category:

- player_props: recent form vs. the average posted line
- arbitrage: cross-book line spread of at least one point
- derivative_markets: first-half totals implying an unusual full-game total
- live_betting: line movement on games in progress
- college_sports: book disagreement on off-peak / untelevised games

The combined list is optionally enriched by the LLM (best-effort), then
filtered by the caller's thresholds and ranked by urgency, then edge.

Database read errors and LLM failures never fail the request: they are logged
and the analyzer carries on with what it has.
"""
import json
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.core.metrics import record_opportunity
from app.models.models import DataProvenance, GameSchedule, LiveOdds, PlayerStat, PropAnalytics, generate_uuid
from app.repositories import (
    LiveOddsRepository,
    PlayerStatsRepository,
    PropAnalyticsRepository,
    ScheduleRepository,
)
from app.repositories.schedule_repository import LIVE_STATUSES
from app.services.ai.llm_client import LLMClient, LLMError
from app.services.ai.prompts import EDGE_ENHANCEMENT_SYSTEM_PROMPT, EDGE_ENHANCEMENT_USER_PROMPT
from app.services.edge import heuristics
from app.services.edge.categories import (
    ARBITRAGE,
    CATEGORY_IDS,
    COLLEGE_SPORTS,
    DERIVATIVE_MARKETS,
    LIVE_BETTING,
    PLAYER_PROPS,
    list_categories,
)
from app.services.sync.utils.name_normalizer import team_names_match

logger = get_logger(__name__)

# Row caps for the analyzer's input window
ODDS_WINDOW = 100
ANALYTICS_WINDOW = 50
STATS_WINDOW_DAYS = 14
STATS_WINDOW = 200
SCHEDULE_WINDOW = 200

RECENT_GAMES = 5
MIN_RECENT_STATS = 3
MIN_BOOKS = 2

DERIVATIVE_CONFIDENCE = 72.0
LIVE_CONFIDENCE = 78.0
LIVE_TIME_TO_ACT = "2-5 minutes"
COLLEGE_CONFIDENCE = 68.0
DERIVATIVE_MARKERS = ("Total", "First Half", "Quarter")

DEFAULT_SPORT = "NBA"

# Top of the minEdge scale; a filter at the cap admits nothing
MAX_MIN_EDGE = 100.0

_PROVENANCE_RANK = {
    DataProvenance.LIVE.value: 0,
    DataProvenance.FALLBACK.value: 1,
    DataProvenance.SYNTHETIC.value: 2,
}


def worst_provenance(rows: Sequence) -> str:
    """The least trustworthy provenance among the rows an opportunity was built from."""
    worst = DataProvenance.LIVE.value
    for row in rows:
        value = row.get("provenance") if isinstance(row, dict) else getattr(row, "provenance", None)
        value = value or DataProvenance.LIVE.value
        if _PROVENANCE_RANK.get(value, 0) > _PROVENANCE_RANK[worst]:
            worst = value
    return worst


@dataclass
class EdgeOpportunity:
    category: str
    title: str
    description: str
    edge_percentage: float
    confidence: float
    urgency: str
    reasoning: str
    sport: str = DEFAULT_SPORT
    player: Optional[str] = None
    team: Optional[str] = None
    books: List[str] = field(default_factory=list)
    time_to_act: Optional[str] = None
    risk_factors: List[str] = field(default_factory=list)
    additional_context: Optional[str] = None
    betting_strategy: Optional[str] = None
    provenance: str = DataProvenance.LIVE.value
    id: str = field(default_factory=generate_uuid)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class EdgeFilter:
    """Caller thresholds. sport="all" disables the sport filter."""
    category: Optional[str] = None
    sport: str = "all"
    min_edge: float = 0.0
    min_confidence: float = 50.0

    def accepts(self, opportunity: EdgeOpportunity) -> bool:
        if self.sport != "all" and opportunity.sport != self.sport:
            return False
        if self.min_edge >= MAX_MIN_EDGE or opportunity.edge_percentage < self.min_edge:
            return False
        return opportunity.confidence >= self.min_confidence


@dataclass
class EdgeTuning:
    """Tunable constants of the derivative and college heuristics."""
    first_half_ratio: float = 0.46
    full_game_baseline: float = 200.0
    derivative_band: float = 20.0
    derivative_threshold: float = 8.0
    college_earliest_hour: int = 18
    college_latest_hour: int = 23
    college_min_variance: float = 1.5
    result_limit: int = 20
    enhance_top_n: int = 5

    @classmethod
    def from_settings(cls) -> "EdgeTuning":
        return cls(
            first_half_ratio=settings.EDGE_FIRST_HALF_RATIO,
            full_game_baseline=settings.EDGE_FULL_GAME_BASELINE,
            derivative_band=settings.EDGE_DERIVATIVE_BAND,
            derivative_threshold=settings.EDGE_DERIVATIVE_THRESHOLD,
            college_earliest_hour=settings.EDGE_COLLEGE_EARLIEST_HOUR,
            college_latest_hour=settings.EDGE_COLLEGE_LATEST_HOUR,
            college_min_variance=settings.EDGE_COLLEGE_MIN_VARIANCE,
            result_limit=settings.EDGE_RESULT_LIMIT,
            enhance_top_n=settings.LLM_ENHANCE_TOP_N,
        )


@dataclass
class AnalysisInputs:
    odds: List[LiveOdds] = field(default_factory=list)
    analytics: List[PropAnalytics] = field(default_factory=list)
    stats: List[PlayerStat] = field(default_factory=list)
    schedule: List[GameSchedule] = field(default_factory=list)

    def data_points(self) -> Dict[str, int]:
        return {
            "liveOdds": len(self.odds),
            "propAnalytics": len(self.analytics),
            "playerStats": len(self.stats),
            "schedule": len(self.schedule),
        }


# =============================================================================
# HEURISTICS
# =============================================================================

def _group_by_player_stat(odds: Sequence[LiveOdds]) -> Dict[Tuple[str, str], List[LiveOdds]]:
    grouped: Dict[Tuple[str, str], List[LiveOdds]] = defaultdict(list)
    for odd in odds:
        grouped[(odd.player_name, odd.stat_type)].append(odd)
    return grouped


def _unique_books(rows: Sequence[LiveOdds]) -> List[str]:
    return list(dict.fromkeys(row.sportsbook for row in rows))


def find_player_props(odds: Sequence[LiveOdds], stats: Sequence[PlayerStat]) -> List[EdgeOpportunity]:
    """
    Recent form against the average posted line.

    Needs quotes from at least two books and at least three recent stat
    values; `stats` is expected newest first.
    """
    opportunities = []
    for (player, stat_type), book_odds in _group_by_player_stat(odds).items():
        if len(book_odds) < MIN_BOOKS:
            continue

        recent = [s for s in stats if s.player_name == player and s.stat_type == stat_type][:RECENT_GAMES]
        if len(recent) < MIN_RECENT_STATS:
            continue

        recent_avg = heuristics.average(s.value for s in recent)
        avg_line = heuristics.average(o.line for o in book_odds)
        edge = heuristics.line_edge(recent_avg, avg_line)
        if edge <= heuristics.PROPS_MIN_EDGE:
            continue

        is_over = recent_avg > avg_line
        side = "Over" if is_over else "Under"
        opportunities.append(EdgeOpportunity(
            category=PLAYER_PROPS,
            title=f"{player} {stat_type} {side} {avg_line:g}",
            description=f"{player} averaging {recent_avg:.1f} in recent games vs line of {avg_line:g}",
            edge_percentage=edge,
            confidence=heuristics.props_confidence(edge),
            urgency=heuristics.props_urgency(edge),
            reasoning=(
                f"Recent {len(recent)}-game average ({recent_avg:.1f}) "
                f"{'exceeds' if is_over else 'falls short of'} the current betting line. "
                f"{edge:.1f}% difference suggests value."
            ),
            sport=book_odds[0].sport or DEFAULT_SPORT,
            player=player,
            team=book_odds[0].team,
            books=_unique_books(book_odds),
            provenance=worst_provenance(list(book_odds) + recent),
        ))
    return opportunities


def find_arbitrage(odds: Sequence[LiveOdds]) -> List[EdgeOpportunity]:
    """Cross-book line spread of at least one full point on the same prop."""
    opportunities = []
    for (player, stat_type), book_odds in _group_by_player_stat(odds).items():
        lines = [o.line for o in book_odds]
        if not heuristics.is_arbitrage(lines):
            continue

        ordered = sorted(book_odds, key=lambda o: o.line)
        lowest, highest = ordered[0], ordered[-1]
        spread, edge = heuristics.line_spread(lines)
        opportunities.append(EdgeOpportunity(
            category=ARBITRAGE,
            title=f"{player} {stat_type} Cross-Book Arb",
            description=(
                f"Line spread of {spread:g} points between {lowest.sportsbook} and {highest.sportsbook}"
            ),
            edge_percentage=edge,
            confidence=heuristics.ARBITRAGE_CONFIDENCE,
            urgency="high",
            reasoning=(
                f"Middle opportunity: over {lowest.line:g} at {lowest.sportsbook} "
                f"and under {highest.line:g} at {highest.sportsbook}"
            ),
            sport=lowest.sport or DEFAULT_SPORT,
            player=player,
            team=lowest.team,
            books=[lowest.sportsbook, highest.sportsbook],
            provenance=worst_provenance(book_odds),
        ))
    return opportunities


def find_derivative_markets(odds: Sequence[LiveOdds], tuning: EdgeTuning) -> List[EdgeOpportunity]:
    """First-half totals whose implied full-game total strays from the baseline."""
    opportunities = []
    for odd in odds:
        if not any(marker in odd.stat_type for marker in DERIVATIVE_MARKERS):
            continue
        if "First Half" not in odd.stat_type:
            continue

        implied_total = heuristics.implied_full_game_total(odd.line, tuning.first_half_ratio)
        if abs(implied_total - tuning.full_game_baseline) <= tuning.derivative_band:
            continue
        edge = heuristics.baseline_deviation(implied_total, tuning.full_game_baseline)
        if edge <= tuning.derivative_threshold:
            continue

        opportunities.append(EdgeOpportunity(
            category=DERIVATIVE_MARKETS,
            title=f"{odd.stat_type} - Formula Pricing Detected",
            description="Derivative line suggests unusual game total expectation",
            edge_percentage=edge,
            confidence=DERIVATIVE_CONFIDENCE,
            urgency=heuristics.derivative_urgency(edge),
            reasoning=(
                f"First-half total of {odd.line:g} implies a {implied_total:.0f} point game total, "
                f"{edge:.1f}% away from the {tuning.full_game_baseline:g} baseline"
            ),
            sport=odd.sport or DEFAULT_SPORT,
            player=odd.player_name,
            team=odd.team,
            books=[odd.sportsbook],
            provenance=worst_provenance([odd]),
        ))
    return opportunities


def _plays_in(odd: LiveOdds, game: GameSchedule) -> bool:
    if odd.sport and game.sport and odd.sport != game.sport:
        return False
    return team_names_match(odd.team, game.home_team) or team_names_match(odd.team, game.away_team)


def find_live_betting(odds: Sequence[LiveOdds], schedule: Sequence[GameSchedule]) -> List[EdgeOpportunity]:
    """Moving lines on games that are currently in progress."""
    live_games = [g for g in schedule if g.status in LIVE_STATUSES]
    opportunities = []
    for game in live_games:
        for odd in odds:
            if not _plays_in(odd, game):
                continue
            if odd.opening_line is None or not odd.line_movement or odd.line_movement == "stable":
                continue

            edge = heuristics.movement_edge(odd.line, odd.opening_line)
            if edge <= heuristics.LIVE_MIN_EDGE:
                continue

            opportunities.append(EdgeOpportunity(
                category=LIVE_BETTING,
                title=f"{odd.player_name} {odd.stat_type} live line moved {odd.line_movement}",
                description=(
                    f"{game.away_team} @ {game.home_team}: line moved from {odd.opening_line:g} "
                    f"to {odd.line:g} at {odd.sportsbook}"
                ),
                edge_percentage=edge,
                confidence=LIVE_CONFIDENCE,
                urgency="high",
                reasoning=(
                    f"{edge:.1f}% in-game movement since open; other books may not have re-priced yet"
                ),
                sport=game.sport,
                player=odd.player_name,
                team=odd.team,
                books=[odd.sportsbook],
                time_to_act=LIVE_TIME_TO_ACT,
                provenance=worst_provenance([odd, game]),
            ))
    return opportunities


def is_college_slot(game: GameSchedule, tuning: EdgeTuning) -> bool:
    """Off-peak tip time, or no broadcast network at all."""
    if not game.network:
        return True
    minutes = heuristics.parse_game_minutes(game.game_time)
    if minutes is None:
        return False
    return minutes < tuning.college_earliest_hour * 60 or minutes > tuning.college_latest_hour * 60


def find_college_sports(
    odds: Sequence[LiveOdds],
    schedule: Sequence[GameSchedule],
    tuning: EdgeTuning
) -> List[EdgeOpportunity]:
    """Book disagreement on games that draw little pricing attention."""
    opportunities = []
    for game in schedule:
        if not is_college_slot(game, tuning):
            continue

        by_stat: Dict[str, List[LiveOdds]] = defaultdict(list)
        for odd in odds:
            if _plays_in(odd, game):
                by_stat[odd.stat_type].append(odd)

        for stat_type, stat_odds in by_stat.items():
            if len(stat_odds) < MIN_BOOKS:
                continue
            variance, edge = heuristics.line_dispersion([o.line for o in stat_odds])
            if variance <= tuning.college_min_variance:
                continue

            opportunities.append(EdgeOpportunity(
                category=COLLEGE_SPORTS,
                title=f"{game.away_team} @ {game.home_team} {stat_type} book disagreement",
                description=f"Books disagree on {stat_type} (line variance {variance:.2f}) in an off-peak game",
                edge_percentage=edge,
                confidence=COLLEGE_CONFIDENCE,
                urgency="medium",
                reasoning=(
                    f"{len(stat_odds)} books quote {stat_type} with variance {variance:.2f}; "
                    f"{game.game_time or 'untimed'} slot{'' if game.network else ' with no broadcast'} draws less pricing effort"
                ),
                sport=game.sport,
                books=_unique_books(stat_odds),
                provenance=worst_provenance(list(stat_odds) + [game]),
            ))
    return opportunities


def rank(opportunities: List[EdgeOpportunity]) -> List[EdgeOpportunity]:
    """Urgency (high first), then edge descending."""
    return sorted(
        opportunities,
        key=lambda o: (heuristics.urgency_rank(o.urgency), o.edge_percentage),
        reverse=True,
    )


# =============================================================================
# ANALYZER
# =============================================================================

class EdgeOpportunityAnalyzer:
    """
    Runs the five edge heuristics over the current data window.

    Usage:
        analyzer = EdgeOpportunityAnalyzer(db, llm_client=LLMClient.from_settings())
        result = await analyzer.analyze(EdgeFilter(sport="NBA", min_edge=5))
    """

    def __init__(
        self,
        db: Session,
        llm_client: Optional[LLMClient] = None,
        tuning: Optional[EdgeTuning] = None,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.db = db
        self.llm_client = llm_client
        self.tuning = tuning or EdgeTuning.from_settings()
        self.clock = clock

    def _read(self, label: str, reader: Callable[[], List]) -> List:
        try:
            return reader()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {label} for edge analysis: {e}")
            self.db.rollback()
            return []

    def load_inputs(self) -> AnalysisInputs:
        """Read the analysis window; a failing table contributes no rows."""
        return AnalysisInputs(
            odds=self._read("live odds", lambda: LiveOddsRepository(self.db).latest(limit=ODDS_WINDOW)),
            analytics=self._read(
                "prop analytics", lambda: PropAnalyticsRepository(self.db).latest(limit=ANALYTICS_WINDOW)
            ),
            stats=self._read(
                "player stats",
                lambda: PlayerStatsRepository(self.db).recent_window(days=STATS_WINDOW_DAYS, limit=STATS_WINDOW),
            ),
            schedule=self._read("schedule", lambda: ScheduleRepository(self.db).upcoming(limit=SCHEDULE_WINDOW)),
        )

    def detect(self, inputs: AnalysisInputs, category: Optional[str] = None) -> List[EdgeOpportunity]:
        """Run every heuristic, or only the one for `category`."""
        detectors = {
            PLAYER_PROPS: lambda: find_player_props(inputs.odds, inputs.stats),
            ARBITRAGE: lambda: find_arbitrage(inputs.odds),
            DERIVATIVE_MARKETS: lambda: find_derivative_markets(inputs.odds, self.tuning),
            LIVE_BETTING: lambda: find_live_betting(inputs.odds, inputs.schedule),
            COLLEGE_SPORTS: lambda: find_college_sports(inputs.odds, inputs.schedule, self.tuning),
        }

        opportunities: List[EdgeOpportunity] = []
        for category_id in CATEGORY_IDS:
            if category and category != category_id:
                continue
            found = detectors[category_id]()
            for opportunity in found:
                opportunity.created_at = self.clock()
                record_opportunity(category_id)
            opportunities.extend(found)
        return opportunities

    def filter_and_rank(
        self,
        opportunities: List[EdgeOpportunity],
        edge_filter: EdgeFilter
    ) -> List[EdgeOpportunity]:
        accepted = [o for o in opportunities if edge_filter.accepts(o)]
        return rank(accepted)[:self.tuning.result_limit]

    async def analyze(self, edge_filter: EdgeFilter) -> Dict:
        """
        Full pipeline: load, detect, enhance, filter and rank.

        Returns:
            {"opportunities": [...], "metadata": {"totalAnalyzed", "dataPoints"}}
        """
        inputs = self.load_inputs()
        opportunities = rank(self.detect(inputs, edge_filter.category))

        if self.llm_client is not None and self.llm_client.enabled and opportunities:
            await self._enhance(opportunities, inputs)

        selected = self.filter_and_rank(opportunities, edge_filter)
        logger.info(
            f"Found {len(selected)} edge opportunities "
            f"({len(opportunities)} analyzed, sport={edge_filter.sport}, category={edge_filter.category})"
        )
        return {
            "opportunities": [o.to_dict() for o in selected],
            "metadata": {
                "totalAnalyzed": len(opportunities),
                "dataPoints": inputs.data_points(),
            },
        }

    async def _enhance(self, opportunities: List[EdgeOpportunity], inputs: AnalysisInputs) -> None:
        """Merge LLM risk factors, context and refined confidence into the top slice, in place."""
        top = opportunities[:self.tuning.enhance_top_n]
        system_prompt = EDGE_ENHANCEMENT_SYSTEM_PROMPT.format(
            categories=json.dumps(
                [{k: c[k] for k in ("id", "title", "description", "why_it_works")} for c in list_categories()],
                indent=2,
            )
        )
        user_prompt = EDGE_ENHANCEMENT_USER_PROMPT.format(
            count=len(top),
            opportunities=json.dumps([o.to_dict() for o in top], indent=2),
            odds_count=len(inputs.odds),
            stats_count=len(inputs.stats),
        )

        try:
            analysis = await self.llm_client.complete_json(system_prompt, user_prompt)
        except LLMError as e:
            logger.warning(f"AI enhancement failed, returning un-enhanced opportunities: {e}")
            return

        enhanced = analysis.get("enhanced_opportunities") if isinstance(analysis, dict) else None
        if not isinstance(enhanced, list):
            logger.warning("AI enhancement response had no enhanced_opportunities list")
            return

        for opportunity, extra in zip(top, enhanced):
            if not isinstance(extra, dict):
                continue
            risk_factors = extra.get("risk_factors")
            if isinstance(risk_factors, list):
                opportunity.risk_factors = [str(r) for r in risk_factors]
            elif isinstance(risk_factors, str):
                opportunity.risk_factors = [risk_factors]
            if extra.get("additional_context"):
                opportunity.additional_context = str(extra["additional_context"])
            if extra.get("betting_strategy"):
                opportunity.betting_strategy = str(extra["betting_strategy"])
            confidence = extra.get("confidence")
            if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
                opportunity.confidence = min(max(float(confidence), 0.0), 100.0)

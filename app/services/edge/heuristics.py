"""
Shared edge, confidence and risk heuristics.

Every place that turns a line and an expectation into an "edge" number goes
through this module: the edge analyzer, the risk/reward endpoint, the
prop-analytics population run and the betting-strategy ranking. The same
inputs therefore always produce the same edge, confidence and urgency.

Percentages are on a 0-100 scale unless a name says otherwise.
"""
import math
import re
from statistics import mean, pvariance
from typing import Iterable, List, Optional, Sequence, Tuple

URGENCY_WEIGHT = {"high": 3, "medium": 2, "low": 1}

# player_props
PROPS_MIN_EDGE = 5.0
PROPS_CONFIDENCE_BASE = 60.0
PROPS_CONFIDENCE_CAP = 90.0
PROPS_HIGH_URGENCY_EDGE = 12.0
PROPS_MEDIUM_URGENCY_EDGE = 8.0

# arbitrage
ARBITRAGE_MIN_SPREAD = 1.0
ARBITRAGE_CONFIDENCE = 95.0

# live_betting
LIVE_MIN_EDGE = 8.0

_GAME_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})\s*([AaPp][Mm])?")


def average(values: Iterable[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty input."""
    values = list(values)
    if not values:
        return None
    return mean(values)


def line_edge(expected: float, line: float) -> float:
    """
    Percentage distance between an expectation and a posted line.

    edge = |expected - line| / line * 100. A non-positive line has no
    meaningful edge and yields 0.
    """
    if line <= 0:
        return 0.0
    return abs(expected - line) / line * 100


def props_confidence(edge: float) -> float:
    """Confidence for a recent-form edge: min(90, 60 + 2 * edge)."""
    return min(PROPS_CONFIDENCE_CAP, PROPS_CONFIDENCE_BASE + edge * 2)


def props_urgency(edge: float) -> str:
    """high above 12, medium above 8, low otherwise (strict inequalities)."""
    if edge > PROPS_HIGH_URGENCY_EDGE:
        return "high"
    if edge > PROPS_MEDIUM_URGENCY_EDGE:
        return "medium"
    return "low"


def line_spread(lines: Sequence[float]) -> Tuple[float, float]:
    """
    Cross-book spread of a set of lines.

    Returns:
        (spread, edge) where spread = max - min and edge = spread / min * 100
    """
    ordered = sorted(lines)
    spread = ordered[-1] - ordered[0]
    if ordered[0] <= 0:
        return spread, 0.0
    return spread, spread / ordered[0] * 100


def is_arbitrage(lines: Sequence[float]) -> bool:
    """True iff at least two lines differ by one full line point or more."""
    if len(lines) < 2:
        return False
    spread, _ = line_spread(lines)
    return spread >= ARBITRAGE_MIN_SPREAD


def movement_edge(current: float, opening: float) -> float:
    """Line movement as a percentage of the current line."""
    if current <= 0:
        return 0.0
    return abs(current - opening) / current * 100


def implied_full_game_total(first_half_line: float, first_half_ratio: float) -> float:
    """Full-game total implied by a first-half total."""
    return first_half_line / first_half_ratio


def baseline_deviation(value: float, baseline: float) -> float:
    """Percentage deviation of a value from a fixed baseline."""
    return abs(value - baseline) / baseline * 100


def derivative_urgency(edge: float) -> str:
    return "high" if edge > 15 else "medium"


def line_dispersion(lines: Sequence[float]) -> Tuple[float, float]:
    """
    Disagreement between books on the same market.

    Returns:
        (variance, edge) with population variance of the lines and
        edge = sqrt(variance) / mean(lines) * 100
    """
    if len(lines) < 2:
        return 0.0, 0.0
    variance = pvariance(lines)
    centre = mean(lines)
    if centre <= 0:
        return variance, 0.0
    return variance, math.sqrt(variance) / centre * 100


def parse_game_minutes(game_time: Optional[str]) -> Optional[int]:
    """
    Minutes past midnight of a display time such as "7:30 PM ET" or "19:30:00".

    Returns None when the string has no recognisable clock time.
    """
    if not game_time:
        return None
    match = _GAME_TIME_RE.search(game_time)
    if not match:
        return None

    hour, minute = int(match.group(1)), int(match.group(2))
    meridiem = (match.group(3) or "").lower()
    if meridiem == "pm" and hour != 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour * 60 + minute


def urgency_rank(urgency: str) -> int:
    return URGENCY_WEIGHT.get(urgency, 0)


# =============================================================================
# RISK / REWARD
# =============================================================================

def american_odds_value(odds: float) -> float:
    """
    Profit per unit staked for American odds.

    +150 -> 1.5, -200 -> 0.5. Zero odds are treated as even money.
    """
    if odds == 0:
        return 1.0
    if odds > 0:
        return odds / 100
    return 100 / abs(odds)


def parse_american_odds(odds: str) -> float:
    """Parse "+120" / "-110" / "EVEN" into a float."""
    text = str(odds).strip().upper()
    if text in ("EVEN", "EV", ""):
        return 100.0
    return float(text.replace("+", ""))


def decimal_to_american(payout: Optional[float]) -> str:
    """Decimal payout (2.5) to an American odds string ("+150")."""
    if not payout:
        return "+100"
    odds = round((payout - 1) * 100)
    return f"+{odds}" if odds >= 0 else str(odds)


def break_even_probability(odds_value: float) -> float:
    """Win probability needed to break even at the given odds value."""
    return 1 / (1 + odds_value)


def risk_score(confidence: float, edge: float, odds_value: float) -> float:
    """
    Blend of uncertainty, thin edge and long odds, 0 (safe) to 1 (risky).

    Args:
        confidence: 0-100
        edge: 0-100
        odds_value: american_odds_value() of the price
    """
    conf = min(max(confidence / 100, 0.0), 1.0)
    edge_fraction = min(max(edge / 100, 0.0), 1.0)
    return (1 - conf) * 0.4 + (1 - edge_fraction) * 0.3 + min(odds_value / 5, 1) * 0.3


def risk_category(score: float, odds_value: float) -> Tuple[str, str]:
    """
    (risk level, strategy name) for a risk score and payout.

    conservative/safe-builder below 0.3 risk and 1.5 payout, moderate/
    balanced-growth below 0.6 risk and 3.0 payout, aggressive/moonshot
    otherwise.
    """
    if score < 0.3 and odds_value < 1.5:
        return "conservative", "safe-builder"
    if score < 0.6 and odds_value < 3:
        return "moderate", "balanced-growth"
    return "aggressive", "moonshot"


def combined_parlay_odds(odds_values: List[float]) -> float:
    """Profit multiple of a parlay from per-leg odds values."""
    total = 1.0
    for value in odds_values:
        total *= 1 + value
    return total - 1

"""
Risk/reward categorisation for individual props and parlay scenarios.

All arithmetic goes through app.services.edge.heuristics so the numbers match
what the edge analyzer reports for the same inputs.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from app.services.edge import heuristics

SIDES = ("over", "under")


@dataclass
class BetOption:
    player: str
    stat: str
    line: float
    over_odds: str
    under_odds: str
    confidence: float
    value_rating: str = "medium"
    edge: Optional[float] = None
    id: Optional[str] = None
    sportsbook: Optional[str] = None

    def odds_for(self, side: str) -> str:
        return self.over_odds if side == "over" else self.under_odds

    def best_odds_value(self) -> float:
        return max(heuristics.american_odds_value(heuristics.parse_american_odds(self.odds_for(s))) for s in SIDES)


@dataclass(frozen=True)
class ScenarioRule:
    risk_level: str
    stake: float
    min_legs: int
    max_legs: int


CONSERVATIVE_SCENARIO = ScenarioRule("conservative", stake=10.0, min_legs=2, max_legs=3)
MODERATE_SCENARIO = ScenarioRule("moderate", stake=5.0, min_legs=3, max_legs=4)
AGGRESSIVE_SCENARIO = ScenarioRule("aggressive", stake=1.0, min_legs=4, max_legs=6)

# +200 or longer
AGGRESSIVE_MIN_ODDS_VALUE = 2.0


def calculate_risk_metrics(bet: BetOption, side: str) -> Dict:
    """Risk metrics for one side of a prop; percentages on a 0-100 scale."""
    odds_value = heuristics.american_odds_value(heuristics.parse_american_odds(bet.odds_for(side)))
    score = heuristics.risk_score(bet.confidence, bet.edge or 0.0, odds_value)
    risk_level, category = heuristics.risk_category(score, odds_value)
    return {
        "side": side,
        "odds": bet.odds_for(side),
        "risk_level": risk_level,
        "category": category,
        "potential_payout": odds_value,
        "reward_multiplier": odds_value,
        "break_even_rate": heuristics.break_even_probability(odds_value) * 100,
        "risk_score": score * 100,
    }


def _scenario(rule: ScenarioRule, candidates: List[BetOption]) -> Optional[Dict]:
    legs = candidates[:rule.max_legs]
    if len(legs) < rule.min_legs:
        return None

    total_odds = heuristics.combined_parlay_odds([bet.best_odds_value() for bet in legs])
    hit_probability = 1.0
    for bet in legs:
        hit_probability *= bet.confidence / 100

    return {
        "risk_level": rule.risk_level,
        "bet_amount": rule.stake,
        "legs": [bet.id or f"{bet.player} {bet.stat} {bet.line:g}" for bet in legs],
        "total_odds": total_odds,
        "potential_payout": rule.stake * (1 + total_odds),
        "hit_probability": hit_probability * 100,
    }


def generate_parlay_scenarios(bets: List[BetOption]) -> List[Dict]:
    """
    Up to three canned parlays:

    - conservative: confidence >= 80 and a high value rating, 2-3 legs, $10
    - moderate: 60 <= confidence < 80, 3-4 legs, $5
    - aggressive: +200 or longer on either side, 4-6 legs, $1
    """
    conservative = [b for b in bets if b.confidence >= 80 and b.value_rating == "high"]
    moderate = [b for b in bets if 60 <= b.confidence < 80]
    aggressive = [b for b in bets if b.best_odds_value() >= AGGRESSIVE_MIN_ODDS_VALUE]

    scenarios = [
        _scenario(CONSERVATIVE_SCENARIO, conservative),
        _scenario(MODERATE_SCENARIO, moderate),
        _scenario(AGGRESSIVE_SCENARIO, aggressive),
    ]
    return [s for s in scenarios if s is not None]


def analyze_risk_reward(bets: List[BetOption]) -> Dict:
    """Per-bet metrics for both sides, bets bucketed by risk level, and parlay scenarios."""
    analyzed = []
    by_risk: Dict[str, List[str]] = {"conservative": [], "moderate": [], "aggressive": []}

    for bet in bets:
        metrics = [calculate_risk_metrics(bet, side) for side in SIDES]
        label = bet.id or f"{bet.player} {bet.stat} {bet.line:g}"
        for level in {m["risk_level"] for m in metrics}:
            by_risk[level].append(label)
        analyzed.append({"bet": label, "sides": metrics})

    return {
        "bets": analyzed,
        "bets_by_risk": by_risk,
        "scenarios": generate_parlay_scenarios(bets),
    }

"""
Edge strategy categories.

The five fixed categories the analyzer emits, with the descriptive copy the
web app shows and the LLM enrichment prompt uses as context.
"""
from typing import Dict, List

PLAYER_PROPS = "player_props"
LIVE_BETTING = "live_betting"
COLLEGE_SPORTS = "college_sports"
ARBITRAGE = "arbitrage"
DERIVATIVE_MARKETS = "derivative_markets"

CATEGORY_IDS = (PLAYER_PROPS, LIVE_BETTING, COLLEGE_SPORTS, ARBITRAGE, DERIVATIVE_MARKETS)

EDGE_CATEGORIES: Dict[str, Dict] = {
    PLAYER_PROPS: {
        "id": PLAYER_PROPS,
        "title": "Player Props",
        "subtitle": "Value in less-scrutinised player lines",
        "description": "Books price main markets carefully; player prop lines get less attention and drift from what recent form supports.",
        "why_it_works": "Recent game logs move faster than prop lines are re-priced, so a consistent gap between form and line is a signal.",
        "examples": [
            "Backup running back receiving yards",
            "Bench rebounds in lopsided games",
            "Role player threes against weak perimeter defence",
        ],
        "difficulty": "Intermediate",
        "profit_potential": "High",
        "time_commitment": "Medium",
    },
    LIVE_BETTING: {
        "id": LIVE_BETTING,
        "title": "Live Betting",
        "subtitle": "Act inside the re-pricing window",
        "description": "In-game lines move after events on the field; the window before every book catches up is short.",
        "why_it_works": "Automated pricing lags sudden changes such as injuries, foul trouble or weather shifts.",
        "examples": [
            "Star player leaves with an injury",
            "Early foul trouble for a starter",
            "Weather turns during an outdoor game",
        ],
        "difficulty": "Advanced",
        "profit_potential": "High",
        "time_commitment": "High",
    },
    COLLEGE_SPORTS: {
        "id": COLLEGE_SPORTS,
        "title": "College Sports",
        "subtitle": "Softer lines away from primetime",
        "description": "Off-peak and untelevised games get less analyst time, so books disagree more on them.",
        "why_it_works": "Pricing effort follows handle; weekday afternoon games draw little of either.",
        "examples": [
            "Mid-major conference basketball",
            "Weekday afternoon games",
            "Early conference tournament rounds",
        ],
        "difficulty": "Intermediate",
        "profit_potential": "Medium",
        "time_commitment": "Medium",
    },
    ARBITRAGE: {
        "id": ARBITRAGE,
        "title": "Line Shopping",
        "subtitle": "Make the books compete",
        "description": "Different sportsbooks post different numbers for the same market; the gap can be taken from both sides.",
        "why_it_works": "Each book models its own customers; when their lines disagree by a full point the middle is exposed.",
        "examples": [
            "Over 24.5 at one book and under 25.5 at another",
            "Spread of -3 versus +3.5 on the same game",
        ],
        "difficulty": "Beginner",
        "profit_potential": "Low",
        "time_commitment": "Medium",
    },
    DERIVATIVE_MARKETS: {
        "id": DERIVATIVE_MARKETS,
        "title": "Alternative Markets",
        "subtitle": "Formula-priced lines",
        "description": "Halves, quarters and team totals are often derived from the main line by a fixed ratio rather than priced directly.",
        "why_it_works": "Teams that start fast or close strong break the fixed split the derived line assumes.",
        "examples": [
            "First-half totals for fast starters",
            "Quarter props where bench depth matters",
            "Team totals against mismatched defences",
        ],
        "difficulty": "Intermediate",
        "profit_potential": "Medium",
        "time_commitment": "Low",
    },
}


def list_categories() -> List[Dict]:
    """All category definitions in display order."""
    return [EDGE_CATEGORIES[category_id] for category_id in CATEGORY_IDS]

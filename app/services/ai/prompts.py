"""
Prompt templates for the LLM gateway.

System prompts are fixed strings; user prompts are built by the service that
owns the data so each template only interpolates what it is given.
"""
from typing import Dict, List

# Relevant metrics per sport, echoed back to clients with insights
SPORT_METRICS: Dict[str, List[str]] = {
    "NFL": ["passing_yards", "rushing_yards", "receiving_yards", "touchdowns", "completions", "attempts", "receptions", "carries"],
    "NBA": ["points", "rebounds", "assists", "steals", "blocks", "three_pointers", "field_goals", "free_throws"],
    "MLB": ["hits", "runs", "rbis", "home_runs", "stolen_bases", "strikeouts", "walks", "batting_average"],
    "NHL": ["goals", "assists", "points", "shots", "hits", "blocks", "penalty_minutes", "faceoff_wins"],
    "WNBA": ["points", "rebounds", "assists", "steals", "blocks", "three_pointers", "field_goals", "free_throws"],
}

# ============================================================================
# EDGE ENHANCEMENT
# ============================================================================

EDGE_ENHANCEMENT_SYSTEM_PROMPT = """You are an expert sports betting analyst. Analyze the provided edge opportunities and enhance them with additional insights. For each opportunity, provide:

1. Risk assessment
2. Additional context (injuries, trends, etc.)
3. Refined confidence score
4. Betting strategy recommendations

Edge categories you may see:
{categories}

Respond with a JSON object of the form
{{"enhanced_opportunities": [{{"risk_factors": [...], "additional_context": "...", "betting_strategy": "...", "confidence": 0-100}}]}}
with one entry per opportunity, in the order given."""

EDGE_ENHANCEMENT_USER_PROMPT = """Analyze these {count} edge opportunities:

{opportunities}

Additional context:
- Total live odds tracked: {odds_count}
- Recent player stats available: {stats_count}

Enhance each opportunity with professional betting insights."""

# ============================================================================
# SPORTS INSIGHTS
# ============================================================================

INSIGHT_SYSTEM_PROMPTS: Dict[str, str] = {
    "current_props": (
        "You are an expert sports betting analyst specializing in {sport}. Analyze current player props "
        "and provide actionable insights based on recent performance, trends, and statistical analysis. "
        "Focus on value bets and risk assessment."
    ),
    "recent_performance": (
        "You are a sports performance analyst with deep expertise in {sport}. Analyze recent player "
        "performance data to identify trends, hot/cold streaks, and performance factors."
    ),
    "sport_trends": (
        "You are a sports trends analyst specializing in {sport}. Identify league-wide trends, statistical "
        "patterns, and emerging betting opportunities."
    ),
    "general": (
        "You are a comprehensive sports analytics expert for {sport}. Provide well-rounded insights "
        "covering props, performance, and trends."
    ),
}

INSIGHT_REQUESTS: Dict[str, str] = {
    "current_props": """Please provide:
1. Top 3-5 value prop recommendations with reasoning
2. Risk assessment for each recommendation
3. Key trends affecting these props
4. Statistical insights supporting your analysis""",
    "recent_performance": """Please provide:
1. Performance trend analysis (last 5-10 games)
2. Players in hot/cold streaks
3. Key performance indicators showing improvement/decline
4. Matchup-specific insights""",
    "sport_trends": """Please provide:
1. League-wide statistical trends
2. Emerging betting patterns
3. Team/player performance shifts
4. Market inefficiencies and opportunities""",
    "general": """Please analyze and provide:
1. Current prop opportunities
2. Recent performance highlights
3. Notable trends and patterns
4. Actionable recommendations
5. Risk factors to consider""",
}

INSIGHT_USER_PROMPT = """Based on the following {sport} data:

Recent Games: {recent_games}
Current Props: {props}
Analytics: {analytics}

{request}

Focus on {sport}-specific metrics: {metrics}"""

# ============================================================================
# EDGE EXPLANATION
# ============================================================================

EXPLAIN_SYSTEM_PROMPT = "You are an expert sports betting analyst. Provide detailed, data-driven analysis."

EXPLAIN_USER_PROMPT = """Analyze this betting edge opportunity in detail:

Player: {player}
Sport: {sport}
Stat Type: {stat_type}

Performance Data:
- Recent Average (Last {games} games): {recent_average}
- Season Average: {season_average}
- Hit Rate: {hit_rate}
- Trend: {trend}
- Line being considered: {line}

Current Betting Lines:
{lines}

Explain in 3-4 paragraphs:
1. Why this edge exists (performance vs line analysis)
2. Key factors supporting this opportunity
3. Risk factors to consider
4. Betting recommendation with confidence level"""

# ============================================================================
# BETTING STRATEGY
# ============================================================================

STRATEGY_SYSTEM_PROMPT = (
    "You are a professional sports betting strategist focused on responsible bankroll management and value betting."
)

STRATEGY_USER_PROMPT = """Create a betting strategy based on these edge opportunities:

Sport: {sport}
Bankroll: {bankroll}
Risk Tolerance: {risk_tolerance}
Base Unit Size: {base_units} units (${unit_stake:.2f} per bet)

Top Opportunities:
{opportunities}

Include:
1. Recommended Bets: 3-5 best bets with unit sizing (based on a {base_units} unit baseline)
2. Portfolio Approach: how to spread risk across these opportunities
3. Parlay Considerations: any 2-3 leg parlays that make sense
4. Bankroll Management for this bankroll and risk tolerance
5. Risk Assessment: what could go wrong and how to mitigate it

Be specific with unit recommendations (e.g. "2 units on ...")."""

NO_OPPORTUNITIES_MESSAGE = (
    "No edge opportunities currently available. Consider loading fresh data or checking back later."
)

# ============================================================================
# EXTERNAL FACTORS
# ============================================================================

EXTERNAL_FACTORS_SYSTEM_PROMPT = """You are an expert sports analyst specializing in identifying external factors that could affect player performance and betting outcomes. Focus on non-gameplay factors like:

- Player motivation (milestones, contract years, revenge games)
- Physical factors (rest, travel, altitude, weather)
- Team dynamics (coaching changes, injuries to teammates)
- Historical patterns (performance in specific situations)

Respond with a JSON object {"insights": [...]} where each insight has:
{
  "type": "motivation|rest|weather|altitude|injury_concern|usage_spike|personal",
  "title": "Brief descriptive title",
  "description": "Explanation of the factor and its potential impact",
  "impact": "positive|negative|neutral",
  "confidence": 65,
  "priority": "high|medium|low"
}

Only include factors with reasonable confidence levels."""

EXTERNAL_FACTORS_USER_PROMPT = """Analyze {player} ({team}) against {opponent} for {stat} prop betting external factors:

Sport: {sport}
Current Line: {line}
Recent Performance: {recent}

Identify external factors that could impact this prop bet: milestones within reach, rest versus fatigue,
motivation, weather or venue, team chemistry, travel and altitude, hometown or revenge games."""

# ============================================================================
# PARLAY SLIP IMAGE
# ============================================================================

PARLAY_IMAGE_SYSTEM_PROMPT = """You are an expert sports betting analyst. Analyze the parlay betting slip image and provide:

1. A breakdown of each bet in the parlay
2. Individual probability assessment for each bet (as a percentage)
3. Overall parlay probability (multiply individual probabilities)
4. A recommendation for each bet (keep, remove, or modify)
5. Risk assessment (low, medium, high)
6. Potential payout analysis
7. Key factors that could affect each bet

Respond with JSON in this shape:
{
  "bets": [
    {
      "description": "bet description",
      "probability": 65,
      "recommendation": "keep|remove|modify",
      "reasoning": "detailed reasoning"
    }
  ],
  "overall_probability": 25.5,
  "risk_level": "medium",
  "total_stake": "$10",
  "potential_payout": "$150",
  "recommendations": ["specific actionable recommendations"],
  "key_factors": ["important factors to consider"]
}"""

PARLAY_IMAGE_USER_PROMPT = (
    "Please analyze this parlay betting slip and provide detailed recommendations "
    "and probability assessments."
)

# ============================================================================
# ASSISTANT
# ============================================================================

ASSISTANT_SYSTEM_PROMPT = """You are an expert betting edge analyst assistant. You help users:
- Find profitable betting opportunities
- Understand why edges exist
- Make informed betting decisions
- Load and analyze sports data

Key principles:
- Be concise, data-driven, and focus on value betting principles
- Never guarantee wins - explain probabilities and edges
- Use emojis sparingly (📊 for stats, 🎯 for opportunities, 💡 for insights)
- Current context: {context}

When responding:
1. If data is missing, suggest loading live data first
2. Explain your reasoning with specific numbers
3. Highlight edge percentage and confidence scores
4. Mention the best sportsbooks for odds when relevant
5. If a tool returns an error, tell the user plainly what could not be retrieved"""

_SPORTS = ["NBA", "NFL", "MLB", "NHL", "WNBA"]

ASSISTANT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "fetch_edge_opportunities",
            "description": "Fetches edge betting opportunities for a sport and optional category",
            "parameters": {
                "type": "object",
                "properties": {
                    "sport": {"type": "string", "enum": _SPORTS, "description": "Sport to analyze"},
                    "category": {
                        "type": "string",
                        "enum": ["player_props", "live_betting", "college_sports", "arbitrage", "derivative_markets"],
                        "description": "Category of edge opportunities",
                    },
                    "minEdge": {"type": "number", "description": "Minimum edge percentage (default: 5)"},
                    "minConfidence": {"type": "number", "description": "Minimum confidence score (default: 70)"},
                },
                "required": [],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "explain_edge",
            "description": "Explains why a specific edge opportunity exists in detail",
            "parameters": {
                "type": "object",
                "properties": {
                    "playerName": {"type": "string", "description": "Player name"},
                    "statType": {"type": "string", "description": "Stat type (e.g., Points, Rebounds)"},
                    "line": {"type": "number", "description": "Line being considered (optional)"},
                    "sport": {"type": "string", "description": "Sport"},
                },
                "required": ["playerName", "statType", "sport"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "suggest_betting_strategy",
            "description": "Suggests betting strategies based on current opportunities",
            "parameters": {
                "type": "object",
                "properties": {
                    "sport": {"type": "string", "enum": _SPORTS, "description": "Sport to analyze"},
                    "bankroll": {"type": "number", "description": "User's bankroll in dollars (optional)"},
                    "riskTolerance": {
                        "type": "string",
                        "enum": ["conservative", "moderate", "aggressive"],
                        "description": "Risk tolerance level",
                    },
                },
                "required": ["sport"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "load_live_data",
            "description": "Fetches fresh odds, stats and schedules for the given sports",
            "parameters": {
                "type": "object",
                "properties": {
                    "sports": {
                        "type": "array",
                        "items": {"type": "string", "enum": _SPORTS},
                        "description": "Sports to load data for",
                    },
                },
                "required": ["sports"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "analyze_player",
            "description": "Deep dive on a specific player's recent performance and analytics",
            "parameters": {
                "type": "object",
                "properties": {
                    "playerName": {"type": "string", "description": "Name of player"},
                    "sport": {"type": "string", "description": "Sport"},
                    "statType": {"type": "string", "description": "Stat to analyze (Points, Rebounds, etc.)"},
                },
                "required": ["playerName", "sport"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "search_schedule",
            "description": "Search game schedules by sport, team, date range, or status",
            "parameters": {
                "type": "object",
                "properties": {
                    "sport": {"type": "string", "enum": _SPORTS + ["all"], "description": "Sport or 'all'"},
                    "team": {"type": "string", "description": "Team name to filter by (home or away)"},
                    "dateFrom": {"type": "string", "description": "Start date YYYY-MM-DD (default: today)"},
                    "dateTo": {"type": "string", "description": "End date YYYY-MM-DD (default: 7 days from now)"},
                    "status": {"type": "string", "enum": ["scheduled", "live", "final"], "description": "Game status"},
                    "limit": {"type": "number", "description": "Maximum number of games (default: 10)"},
                },
                "required": [],
            },
        },
    },
]

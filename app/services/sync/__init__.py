"""
Data Sync Service

Fetches odds, stats and schedules from third-party providers and derives
analytics from what was stored.

Key components:
- Adapters: One per provider, normalize and upsert rows
- Matchers: De-duplicate schedule rows reported by several providers
- Populators: Prop analytics and matchup history
- Orchestrator: Coordinate sync jobs for the routes and the scheduler
"""

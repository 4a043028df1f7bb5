"""
API routes, all mounted under /api/v1.

Every league shares the same routes; the sport is a path, query or body
parameter.

- edge: opportunities, categories, risk-reward
- ai: insights, explain-edge, betting-strategy, external-factors, assistant
- data: provider fetchers, generators, populate-all
- props: the prop board (odds joined with analytics)
- schedule: schedule search
- players: player search, head-to-head matchups
- access: access-code redemption, profiles
- parlays: saved parlays
"""

"""Populators derive or synthesize rows from what the fetchers stored.

- prop_analytics: per (player, stat type, sport) summaries from odds and stats
- matchups: synthetic NBA head-to-head history
"""

"""
Services module for shared business logic.

This module organizes services into:
- core: Provider plumbing and cross-sport services (adapters base, circuit
  breakers, caching, player search, access, parlays, props query)
- edge: Edge opportunity detection and risk/reward heuristics
- ai: LLM gateway client, prompts and the AI insight services
- sync: Fetchers, populators and the sync orchestrator
"""

"""LLM-backed insight services and the tool-calling assistant."""

"""Socratic problem solver: LLM gateway, problem hierarchy service, API, and client."""

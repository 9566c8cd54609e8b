"""LLM client, prompts and the retrieve-then-generate pipeline."""

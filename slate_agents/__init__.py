"""Slate agent orchestration: planning, confirmation and execution."""

"""
Task-specific prompt templates for LLM services.
"""

from thermoscan.services.llm.prompts.tasks.thermogram_summary import ThermogramSummaryPrompts

__all__ = ["ThermogramSummaryPrompts"]

"""Message processing components."""

from .content import extract_text
from .llm import Summarizer
from .rules import classify, comparison_address, create_rule_set

__all__ = ["Summarizer", "classify", "comparison_address", "create_rule_set", "extract_text"]

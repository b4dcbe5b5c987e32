"""
Models module for the text generator abstraction.
"""

from mock_interview_coach.models.llm_client import (
    OllamaTextGenerator,
    TextGenerator,
    invoke_generator,
)

__all__ = [
    "OllamaTextGenerator",
    "TextGenerator",
    "invoke_generator",
]

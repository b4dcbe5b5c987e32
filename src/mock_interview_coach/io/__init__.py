"""
IO module for interview interfaces.
"""

from mock_interview_coach.io.text_interface import TextInterface

__all__ = ["TextInterface"]

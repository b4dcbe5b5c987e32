"""
Mock Interview Coach.

Runs mock interviews against a text generator and produces a scored,
structured assessment when the candidate submits.
"""

__version__ = "0.1.0"

"""
Round Phase Enumeration

Defines the session states driven by the round scheduler.
"""

from enum import Enum


class RoundPhase(Enum):
    """Round phase enumeration."""
    LOBBY = "lobby"
    QUESTION_OPEN = "question_open"
    EVALUATING = "evaluating"
    REVEAL = "reveal"
    COMPLETE = "complete"

# -*- coding: utf-8 -*-
"""
Game sessions.

This module provides the `Session` class, which plays a game of 2048 and keeps its saved state.
"""

from .session import GameStatus, MoveOutcome, Session

__all__ = ["GameStatus", "MoveOutcome", "Session"]

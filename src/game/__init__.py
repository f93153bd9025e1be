"""
Game Module
===========

The simulation that produces telemetry for the network.

Classes:
    FlappyBird - Side-scrolling flappy bird game
    Bird       - The player-controlled bird
    Pipe       - A pipe pair with a gap
    GamePhase  - idle / playing / gameover
"""

from .flappy import FlappyBird, Bird, Pipe, GamePhase

__all__ = ['FlappyBird', 'Bird', 'Pipe', 'GamePhase']

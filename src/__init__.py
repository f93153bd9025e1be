"""
NeuroFlap - Source Package
==========================

A small neural network learns to play flappy bird by imitating labelled play.

Modules:
    game/       - The flappy bird simulation
    ai/         - Network, training buffer, trainer, policy and session
    visualizer/ - Real-time network and statistics drawing
    utils/      - Logging
"""

__version__ = "1.0.0"

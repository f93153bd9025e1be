"""
Visualizer Module
=================

Real-time drawing of the network and session statistics.

Classes:
    NeuralNetVisualizer - Draws the network structure and live activations
    TrainingHUD         - On-screen mode, score and training statistics overlay
"""

from .nn_visualizer import NeuralNetVisualizer
from .hud import TrainingHUD

__all__ = ['NeuralNetVisualizer', 'TrainingHUD']

"""
AI Module
=========

Supervised online learning of a flap controller.

Classes:
    FlapNetwork     - 4-8-1 sigmoid network with hand-written backpropagation
    NetworkView     - Read-only handle on a FlapNetwork
    Telemetry       - Normalized simulation state fed to the network
    TrainingBuffer  - Bounded FIFO memory of labelled samples
    Trainer         - Sample collection and epoch/continuous training
    FrameScheduler  - Cooperative per-frame scheduling of long-running loops
    ControlPolicy   - Thresholded flap decisions
    Autopilot       - Autonomous-play loop

The LearningSession orchestrator lives in src.ai.session.
"""

from .network import FlapNetwork, NetworkView, DimensionMismatchError
from .telemetry import Telemetry, InvalidTelemetryError
from .training_buffer import Sample, TrainingBuffer
from .trainer import Trainer, TrainingStats, heuristic_action
from .scheduler import FrameScheduler, CancellationToken
from .policy import ControlPolicy, Autopilot

__all__ = [
    'FlapNetwork', 'NetworkView', 'DimensionMismatchError',
    'Telemetry', 'InvalidTelemetryError',
    'Sample', 'TrainingBuffer',
    'Trainer', 'TrainingStats', 'heuristic_action',
    'FrameScheduler', 'CancellationToken',
    'ControlPolicy', 'Autopilot',
]

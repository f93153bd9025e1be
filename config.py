"""
Configuration file for NeuroFlap
================================

All hyperparameters, simulation settings, and visualization options are centralized here.
Modify these values to experiment with different training configurations.

Usage:
    from config import Config
    cfg = Config()
    print(cfg.LEARNING_RATE)
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional


@dataclass
class Config:
    """
    Central configuration for the entire project.

    Sections:
    1. Screen Settings - Window and panel layout
    2. Flappy Bird Settings - Bird and pipe physics
    3. Neural Network - Architecture configuration
    4. Training - Learning hyperparameters and buffer sizes
    5. Control - Autonomous play settings
    6. Visualization - Display options
    7. System - Paths, logging and seeding
    """

    # =========================================================================
    # SCREEN SETTINGS
    # =========================================================================

    # Game area dimensions
    SCREEN_WIDTH: int = 400
    SCREEN_HEIGHT: int = 600

    # Width of the neural network panel drawn to the right of the game
    PANEL_WIDTH: int = 320

    FPS: int = 60

    # =========================================================================
    # FLAPPY BIRD SETTINGS
    # =========================================================================

    # Bird
    BIRD_X: int = 80
    BIRD_WIDTH: int = 34
    BIRD_HEIGHT: int = 24
    GRAVITY: float = 0.6
    FLAP_FORCE: float = -8.0
    TERMINAL_VELOCITY: float = 12.0

    # Collision box is shrunk by this many pixels on every side
    BIRD_HITBOX_INSET: int = 4

    # Pipes
    PIPE_WIDTH: int = 60
    PIPE_SPEED: int = 3
    PIPE_GAP: int = 150
    PIPE_SPAWN_INTERVAL: int = 100  # Frames between pipe spawns
    PIPE_GAP_MARGIN: int = 80       # Minimum distance of a gap from ceiling/ground
    GROUND_HEIGHT: int = 50

    # Telemetry normalisation: velocity v maps to (v + OFFSET) / RANGE
    VELOCITY_OFFSET: float = 15.0
    VELOCITY_RANGE: float = 30.0

    # =========================================================================
    # NEURAL NETWORK ARCHITECTURE
    # =========================================================================

    # Input features:
    # - Bird height        (position_y)
    # - Bird velocity      (velocity)
    # - Distance to pipe   (distance)
    # - Gap center height  (gap_center_y)
    INPUT_SIZE: int = 4

    # Single hidden layer
    HIDDEN_SIZE: int = 8

    # Single output: probability of flapping
    OUTPUT_SIZE: int = 1

    # Pre-activations are clamped to [-SIGMOID_CLAMP, SIGMOID_CLAMP] before exp()
    SIGMOID_CLAMP: float = 500.0

    # =========================================================================
    # TRAINING HYPERPARAMETERS
    # =========================================================================

    # Learning rate - How big of steps to take during gradient descent
    # Too high: weights saturate the sigmoids
    # Too low: very slow learning
    LEARNING_RATE: float = 0.1

    # Samples per scheduling chunk inside an epoch.
    # Also the minimum buffer size before any training happens.
    BATCH_SIZE: int = 32

    # Training buffer capacity (oldest sample is dropped first)
    MAX_SAMPLES: int = 10_000

    # Epochs run per scheduler tick in continuous training
    EPOCHS_PER_BURST: int = 10

    # Epochs for a one-shot training run (headless mode)
    DEFAULT_EPOCHS: int = 100

    # Weight of velocity in the heuristic flap label:
    # flap if position_y > gap_center_y - (velocity - 0.5) * weight
    HEURISTIC_VELOCITY_WEIGHT: float = 0.1

    # =========================================================================
    # CONTROL
    # =========================================================================

    # Network output must be strictly above this to flap
    DECISION_THRESHOLD: float = 0.5

    # Samples needed before autonomous play is offered
    AI_UNLOCK_SAMPLES: int = 100

    # Frame limit for a single headless evaluation game (0 = unlimited)
    MAX_FRAMES_PER_GAME: int = 20_000

    # =========================================================================
    # VISUALIZATION SETTINGS
    # =========================================================================

    # Colors (RGB tuples)
    COLOR_SKY: Tuple[int, int, int] = (135, 206, 235)
    COLOR_GROUND: Tuple[int, int, int] = (83, 166, 0)
    COLOR_GROUND_LINE: Tuple[int, int, int] = (0, 255, 136)
    COLOR_PIPE: Tuple[int, int, int] = (0, 204, 85)
    COLOR_PIPE_BORDER: Tuple[int, int, int] = (0, 136, 51)
    COLOR_BIRD: Tuple[int, int, int] = (255, 221, 0)
    COLOR_TEXT: Tuple[int, int, int] = (255, 255, 255)

    # Neural network visualizer
    VIS_NEURON_RADIUS: int = 12
    VIS_NEURON_SPACING: int = 35
    VIS_INPUT_LABELS: List[str] = field(default_factory=lambda: [
        'Bird Y', 'Velocity', 'Dist', 'Gap Y'
    ])
    VIS_OUTPUT_LABELS: List[str] = field(default_factory=lambda: ['Flap'])

    # Activation coloring
    VIS_COLOR_INACTIVE: Tuple[int, int, int] = (189, 195, 199)
    VIS_COLOR_ACTIVE: Tuple[int, int, int] = (46, 204, 113)
    VIS_COLOR_WEIGHT_POS: Tuple[int, int, int] = (39, 174, 96)
    VIS_COLOR_WEIGHT_NEG: Tuple[int, int, int] = (192, 57, 43)

    # =========================================================================
    # SYSTEM SETTINGS
    # =========================================================================

    # Paths
    MODEL_DIR: str = 'models'
    LOG_DIR: str = 'logs'

    # Log level name: 'DEBUG', 'INFO', 'WARNING', 'ERROR'
    LOG_LEVEL: str = 'INFO'

    # Random seed for reproducibility (None for random)
    SEED: Optional[int] = None

    def __post_init__(self):
        """Validation and derived calculations."""
        assert self.LEARNING_RATE > 0, "Learning rate must be positive"
        assert self.BATCH_SIZE > 0, "Batch size must be positive"
        assert self.BATCH_SIZE <= self.MAX_SAMPLES, "Batch size must not exceed MAX_SAMPLES"
        assert self.EPOCHS_PER_BURST > 0, "EPOCHS_PER_BURST must be positive"
        assert 0 < self.DECISION_THRESHOLD < 1, "Decision threshold must be in (0, 1)"
        assert min(self.INPUT_SIZE, self.HIDDEN_SIZE, self.OUTPUT_SIZE) > 0, \
            "Network layer sizes must be positive"
        assert self.VELOCITY_RANGE > 0, "VELOCITY_RANGE must be positive"


# Global config instance for easy importing
config = Config()


if __name__ == "__main__":
    # Print configuration summary
    cfg = Config()
    print("=" * 60)
    print("NeuroFlap - Configuration Summary")
    print("=" * 60)
    print(f"\nGame: {cfg.SCREEN_WIDTH}x{cfg.SCREEN_HEIGHT} @ {cfg.FPS} FPS")
    print(f"\nNeural Network:")
    print(f"   {cfg.INPUT_SIZE} -> {cfg.HIDDEN_SIZE} -> {cfg.OUTPUT_SIZE} (sigmoid)")
    print(f"\nTraining:")
    print(f"   Learning rate: {cfg.LEARNING_RATE}")
    print(f"   Batch size: {cfg.BATCH_SIZE}")
    print(f"   Buffer capacity: {cfg.MAX_SAMPLES:,}")
    print(f"   Epochs per burst: {cfg.EPOCHS_PER_BURST}")
    print("=" * 60)

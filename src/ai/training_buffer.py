"""
Training Sample Buffer
======================

A bounded memory of (telemetry, label) pairs collected while a human plays.

Why a bounded buffer?
    1. Keeps every epoch affordable inside a single frame budget
       (an epoch visits every stored sample)

    2. Lets the dataset follow the player's most recent behaviour
       (old samples age out as new ones arrive)

How it works:
    1. Each tick of manual play adds one Sample (4 features, 1 label)
    2. The Trainer reads the whole buffer in insertion order and shuffles it per epoch
    3. When the buffer is full, the oldest sample is discarded (strict FIFO)
"""

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Sample:
    """
    One supervised training example.

    Attributes:
        inputs: Normalized telemetry features (position_y, velocity, distance, gap_center_y)
        target: Expected network output (1.0 = flap, 0.0 = don't)
    """
    inputs: Tuple[float, ...]
    target: Tuple[float, ...]

    @classmethod
    def create(cls, inputs: Sequence[float], target: Sequence[float]) -> 'Sample':
        return cls(tuple(float(v) for v in inputs), tuple(float(v) for v in target))


class TrainingBuffer:
    """
    Fixed-capacity FIFO buffer with contiguous numpy storage.

    Samples are written into preallocated arrays at a rotating position, so
    appending never shifts memory. Logical index 0 is always the oldest
    sample still held; reads never change that order.

    Example:
        >>> buffer = TrainingBuffer(capacity=10000)
        >>> buffer.push(Sample.create([0.5, 0.5, 0.3, 0.4], [1.0]))
        >>> inputs, targets = buffer.as_arrays()
    """

    def __init__(self, capacity: int = 10_000, input_size: int = 4, target_size: int = 1):
        """
        Initialize the buffer.

        Args:
            capacity: Maximum number of samples to keep
            input_size: Length of each sample's input vector
            target_size: Length of each sample's target vector
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.input_size = input_size
        self.target_size = target_size

        self.inputs = np.empty((capacity, input_size), dtype=np.float64)
        self.targets = np.empty((capacity, target_size), dtype=np.float64)

        self._size = 0      # Number of samples stored
        self._position = 0  # Next write slot

    def push(self, sample: Sample) -> None:
        """
        Append a sample, overwriting the oldest one when full.

        Raises:
            ValueError: If the sample's vectors have the wrong length
        """
        if len(sample.inputs) != self.input_size or len(sample.target) != self.target_size:
            raise ValueError(
                f"Sample shape ({len(sample.inputs)}, {len(sample.target)}) does not match "
                f"buffer shape ({self.input_size}, {self.target_size})"
            )

        self.inputs[self._position] = sample.inputs
        self.targets[self._position] = sample.target

        self._position = (self._position + 1) % self.capacity
        self._size = min(self._size + 1, self.capacity)

    def _ordered_slots(self) -> np.ndarray:
        """Physical slots of the stored samples, oldest first."""
        start = (self._position - self._size) % self.capacity
        return (start + np.arange(self._size)) % self.capacity

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Copy out all samples in insertion order.

        Returns:
            (inputs, targets) arrays of shape (len, input_size) and (len, target_size)
        """
        slots = self._ordered_slots()
        return self.inputs[slots].copy(), self.targets[slots].copy()

    def __getitem__(self, index: int) -> Sample:
        if index < 0:
            index += self._size
        if not 0 <= index < self._size:
            raise IndexError(f"Sample index {index} out of range for buffer of {self._size}")
        slot = (self._position - self._size + index) % self.capacity
        return Sample(tuple(self.inputs[slot].tolist()), tuple(self.targets[slot].tolist()))

    def __iter__(self) -> Iterator[Sample]:
        for i in range(self._size):
            yield self[i]

    def __len__(self) -> int:
        """Return current buffer size."""
        return self._size

    def is_full(self) -> bool:
        return self._size == self.capacity

    def is_ready(self, batch_size: int) -> bool:
        """Check if buffer has enough samples for a training run."""
        return self._size >= batch_size

    def clear(self) -> None:
        """Remove all samples from the buffer."""
        self._size = 0
        self._position = 0

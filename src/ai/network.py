"""
Flap Network Architecture
=========================

A small fully-connected network that learns when the bird should flap.

Architecture:
    Input (4)  ->  Hidden (8, sigmoid)  ->  Output (1, sigmoid)

    Input:  Normalized telemetry (bird height, velocity, pipe distance, gap center)
    Output: Probability that flapping is the right move

Training is plain single-sample backpropagation on squared error:
    output_error = (target - output) * output * (1 - output)
    hidden_error = (W_HO @ output_error) * hidden * (1 - hidden)
    W += learning_rate * outer(activation, error)

Gradients are computed by hand on float64 tensors rather than with autograd,
so every update is applied in place immediately after each sample.

Key Features:
    - Seedable weight initialization (uniform in [-1, 1], zero biases)
    - Cached activations of the latest forward pass for visualization
    - Parameter snapshot export/import (JSON-friendly nested lists)
    - Read-only NetworkView for consumers that must not train the model
"""

import json
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import torch

import sys
sys.path.append('../..')
from config import Config
from src.utils.logger import get_logger, log_model_event

_logger = get_logger(__name__)

DTYPE = torch.float64

# Keys of the persisted parameter record
PARAMETER_KEYS = ('weightsIH', 'weightsHO', 'biasH', 'biasO')

ArrayLike = Union[Sequence[float], np.ndarray, torch.Tensor]


class DimensionMismatchError(ValueError):
    """Raised when a vector or parameter does not match the network's dimensions."""


def sigmoid(x: torch.Tensor, clamp: float = 500.0) -> torch.Tensor:
    """Logistic activation with the pre-activation clamped to avoid overflow."""
    return 1.0 / (1.0 + torch.exp(-torch.clamp(x, -clamp, clamp)))


def sigmoid_derivative(activated: torch.Tensor) -> torch.Tensor:
    """Derivative of the sigmoid expressed through its output value."""
    return activated * (1.0 - activated)


class FlapNetwork:
    """
    Two-layer sigmoid network with hand-written backpropagation.

    Parameters are stored input-major: weights_ih has shape
    (input_size, hidden_size) and weights_ho has shape (hidden_size, output_size).

    Attributes:
        weights_ih, weights_ho: Weight matrices
        bias_h, bias_o: Bias vectors
        last_inputs, last_hidden, last_output: Activations of the latest
            forward pass, or None before the first one

    Example:
        >>> net = FlapNetwork(4, 8, 1, seed=42)
        >>> out = net.forward([0.5, 0.5, 0.3, 0.4])
        >>> loss = net.train_step([0.5, 0.5, 0.3, 0.4], [1.0], learning_rate=0.1)
    """

    def __init__(
        self,
        input_size: int = 4,
        hidden_size: int = 8,
        output_size: int = 1,
        config: Optional[Config] = None,
        seed: Optional[int] = None,
        generator: Optional[torch.Generator] = None,
        parameters: Optional[Dict[str, torch.Tensor]] = None,
    ):
        """
        Initialize the network.

        Args:
            input_size: Number of input features
            hidden_size: Number of hidden neurons
            output_size: Number of outputs
            config: Configuration object (sigmoid clamp)
            seed: Seed for a private weight-initialization generator
            generator: Explicit torch generator (takes precedence over seed)
            parameters: Pre-built parameter tensors; skips random initialization
        """
        self.config = config or Config()
        self.input_size = input_size
        self.hidden_size = hidden_size
        self.output_size = output_size
        self.sigmoid_clamp = self.config.SIGMOID_CLAMP

        if generator is None and seed is not None:
            generator = torch.Generator().manual_seed(seed)
        self._generator = generator

        if parameters is None:
            self.weights_ih = self.initialize_weights(input_size, hidden_size)
            self.weights_ho = self.initialize_weights(hidden_size, output_size)
            self.bias_h = torch.zeros(hidden_size, dtype=DTYPE)
            self.bias_o = torch.zeros(output_size, dtype=DTYPE)
        else:
            self.weights_ih = parameters['weights_ih']
            self.weights_ho = parameters['weights_ho']
            self.bias_h = parameters['bias_h']
            self.bias_o = parameters['bias_o']

        self.last_inputs: Optional[torch.Tensor] = None
        self.last_hidden: Optional[torch.Tensor] = None
        self.last_output: Optional[torch.Tensor] = None

    def initialize_weights(self, rows: int, cols: int) -> torch.Tensor:
        """
        Draw a (rows, cols) matrix uniformly from [-1, 1].

        This is a plain uniform draw, not scaled by fan-in/fan-out.
        """
        uniform = torch.rand(rows, cols, generator=self._generator, dtype=DTYPE)
        return uniform * 2.0 - 1.0

    def _as_vector(self, values: ArrayLike, expected: int, what: str) -> torch.Tensor:
        vector = torch.as_tensor(values, dtype=DTYPE).clone()
        if vector.dim() != 1 or vector.shape[0] != expected:
            raise DimensionMismatchError(
                f"Expected {expected} {what}, got shape {tuple(vector.shape)}"
            )
        return vector

    def forward(self, inputs: ArrayLike) -> torch.Tensor:
        """
        Forward pass through the network.

        Args:
            inputs: Vector of input_size features

        Returns:
            Output tensor of shape (output_size,), each value in (0, 1)

        Raises:
            DimensionMismatchError: If inputs (or restored parameters) have the wrong shape
        """
        x = self._as_vector(inputs, self.input_size, 'inputs')
        _, output = self._propagate(x)
        return output.clone()

    def _check_parameter_shapes(self) -> None:
        """Restored parameters are only validated here, on the next pass."""
        expected = {
            'weightsIH': (self.weights_ih, (self.input_size, self.hidden_size)),
            'weightsHO': (self.weights_ho, (self.hidden_size, self.output_size)),
            'biasH': (self.bias_h, (self.hidden_size,)),
            'biasO': (self.bias_o, (self.output_size,)),
        }
        for name, (tensor, shape) in expected.items():
            if tuple(tensor.shape) != shape:
                raise DimensionMismatchError(
                    f"Network parameters do not match {self.input_size}-{self.hidden_size}-"
                    f"{self.output_size} layout: {name} has shape {tuple(tensor.shape)}, expected {shape}"
                )

    def _propagate(self, x: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor]:
        """Compute and cache hidden and output activations for a validated input vector."""
        self._check_parameter_shapes()

        hidden = sigmoid(x @ self.weights_ih + self.bias_h, self.sigmoid_clamp)
        output = sigmoid(hidden @ self.weights_ho + self.bias_o, self.sigmoid_clamp)

        self.last_inputs = x
        self.last_hidden = hidden
        self.last_output = output

        return hidden, output

    def train_step(
        self,
        inputs: ArrayLike,
        targets: ArrayLike,
        learning_rate: float = 0.1
    ) -> float:
        """
        Run one forward pass and apply one backpropagation update in place.

        Args:
            inputs: Vector of input_size features
            targets: Vector of output_size expected outputs
            learning_rate: Step size

        Returns:
            Mean squared error over the output units for this sample
        """
        x = self._as_vector(inputs, self.input_size, 'inputs')
        t = self._as_vector(targets, self.output_size, 'targets')
        hidden, output = self._propagate(x)

        errors = t - output
        output_errors = errors * sigmoid_derivative(output)

        # Back-propagate through the pre-update hidden->output weights
        hidden_errors = (self.weights_ho @ output_errors) * sigmoid_derivative(hidden)

        self.weights_ho += learning_rate * torch.outer(hidden, output_errors)
        self.bias_o += learning_rate * output_errors
        self.weights_ih += learning_rate * torch.outer(x, hidden_errors)
        self.bias_h += learning_rate * hidden_errors

        return float(torch.mean(errors * errors))

    def get_parameters(self) -> Dict[str, np.ndarray]:
        """
        Get copies of all parameters as numpy arrays (for visualization).

        Returns:
            Dict with weightsIH, weightsHO, biasH, biasO
        """
        return {
            'weightsIH': self.weights_ih.detach().cpu().numpy().copy(),
            'weightsHO': self.weights_ho.detach().cpu().numpy().copy(),
            'biasH': self.bias_h.detach().cpu().numpy().copy(),
            'biasO': self.bias_o.detach().cpu().numpy().copy(),
        }

    def get_activations(self) -> Dict[str, np.ndarray]:
        """
        Get the activations of the latest forward pass.

        Before any forward pass each entry is a zero vector of the right size.
        """
        def as_array(cached: Optional[torch.Tensor], size: int) -> np.ndarray:
            if cached is None:
                return np.zeros(size, dtype=np.float64)
            return cached.cpu().numpy().copy()

        return {
            'inputs': as_array(self.last_inputs, self.input_size),
            'hidden': as_array(self.last_hidden, self.hidden_size),
            'output': as_array(self.last_output, self.output_size),
        }

    def get_layer_info(self) -> List[Dict[str, Any]]:
        """Get information about each layer for visualization."""
        return [
            {'name': 'Input', 'neurons': self.input_size, 'type': 'input'},
            {'name': 'Hidden', 'neurons': self.hidden_size, 'type': 'hidden'},
            {'name': 'Output', 'neurons': self.output_size, 'type': 'output'},
        ]

    def count_parameters(self) -> int:
        """Return total number of trainable parameters."""
        return sum(
            p.numel() for p in (self.weights_ih, self.weights_ho, self.bias_h, self.bias_o)
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot_parameters(self) -> Dict[str, List]:
        """Export the four parameter arrays as nested lists of floats."""
        return {
            'weightsIH': self.weights_ih.tolist(),
            'weightsHO': self.weights_ho.tolist(),
            'biasH': self.bias_h.tolist(),
            'biasO': self.bias_o.tolist(),
        }

    def restore_parameters(self, data: Dict[str, Any]) -> None:
        """
        Replace all four parameter arrays from a snapshot.

        Shapes are not checked against this network: a snapshot from a
        differently sized network is accepted here and fails on the next
        forward pass. A malformed payload raises before anything is replaced.
        """
        parsed = {key: torch.tensor(data[key], dtype=DTYPE) for key in PARAMETER_KEYS}

        self.weights_ih = parsed['weightsIH']
        self.weights_ho = parsed['weightsHO']
        self.bias_h = parsed['biasH']
        self.bias_o = parsed['biasO']

    def to_json(self) -> str:
        """Export the parameter snapshot as a JSON string."""
        return json.dumps(self.snapshot_parameters())

    def from_json(self, payload: str) -> None:
        """Import a parameter snapshot from a JSON string."""
        self.restore_parameters(json.loads(payload))

    def clone(self) -> 'FlapNetwork':
        """Deep-copy the parameters into a new network (activations are not copied)."""
        return FlapNetwork(
            self.input_size,
            self.hidden_size,
            self.output_size,
            config=self.config,
            parameters={
                'weights_ih': self.weights_ih.clone(),
                'weights_ho': self.weights_ho.clone(),
                'bias_h': self.bias_h.clone(),
                'bias_o': self.bias_o.clone(),
            },
        )

    # ------------------------------------------------------------------
    # Checkpoints
    # ------------------------------------------------------------------

    def save(self, filepath: str, **metadata: Any) -> None:
        """
        Save the parameter snapshot to a checkpoint file.

        Args:
            filepath: Destination path (directories are created)
            **metadata: Extra context stored alongside (e.g. trained_epochs)
        """
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        checkpoint = {
            'input_size': self.input_size,
            'hidden_size': self.hidden_size,
            'output_size': self.output_size,
            'parameters': self.snapshot_parameters(),
            'metadata': dict(metadata),
        }
        torch.save(checkpoint, filepath)
        log_model_event('save', filepath, **metadata)

    def load(self, filepath: str) -> bool:
        """
        Load a checkpoint written by save().

        Returns:
            True on success, False if the file is missing or was saved by a
            network with different layer sizes
        """
        if not os.path.exists(filepath):
            _logger.error(f"Model file not found: {filepath}")
            return False

        checkpoint = torch.load(filepath, map_location='cpu', weights_only=True)

        saved_sizes = (
            checkpoint.get('input_size'),
            checkpoint.get('hidden_size'),
            checkpoint.get('output_size'),
        )
        current_sizes = (self.input_size, self.hidden_size, self.output_size)
        if saved_sizes != current_sizes:
            _logger.warning(
                f"Model incompatible: saved layout {saved_sizes}, current {current_sizes}"
            )
            return False

        self.restore_parameters(checkpoint['parameters'])
        log_model_event('load', filepath, **checkpoint.get('metadata', {}))
        return True


class NetworkView:
    """
    Read-only handle on a FlapNetwork.

    Exposes evaluation and inspection but no way to train or replace
    parameters. Forward passes still refresh the network's activation cache.
    """

    def __init__(self, network: FlapNetwork):
        self._network = network

    def _bind(self, network: FlapNetwork) -> None:
        """Point the view at a replacement network (owner use only)."""
        self._network = network

    @property
    def input_size(self) -> int:
        return self._network.input_size

    @property
    def hidden_size(self) -> int:
        return self._network.hidden_size

    @property
    def output_size(self) -> int:
        return self._network.output_size

    def forward(self, inputs: ArrayLike) -> torch.Tensor:
        return self._network.forward(inputs)

    def get_parameters(self) -> Dict[str, np.ndarray]:
        return self._network.get_parameters()

    def get_activations(self) -> Dict[str, np.ndarray]:
        return self._network.get_activations()

    def get_layer_info(self) -> List[Dict[str, Any]]:
        return self._network.get_layer_info()

    def count_parameters(self) -> int:
        return self._network.count_parameters()


# Testing
if __name__ == "__main__":
    config = Config()

    net = FlapNetwork(config.INPUT_SIZE, config.HIDDEN_SIZE, config.OUTPUT_SIZE, config, seed=0)

    print("=" * 60)
    print("Flap Network Architecture")
    print("=" * 60)

    for i, info in enumerate(net.get_layer_info()):
        print(f"Layer {i}: {info['name']} - {info['neurons']} neurons ({info['type']})")

    print(f"\nTotal parameters: {net.count_parameters():,}")

    sample = [0.6, 0.5, 0.4, 0.5]
    for step in range(5):
        loss = net.train_step(sample, [1.0], learning_rate=0.5)
        print(f"  step {step}: loss={loss:.6f}")

    print(f"\nActivations captured:")
    for name, act in net.get_activations().items():
        print(f"  {name}: {np.round(act, 3)}")

    print("=" * 60)

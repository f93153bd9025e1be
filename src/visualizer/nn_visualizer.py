"""
Neural Network Visualizer
=========================

Live drawing of the flap network: 4 inputs, 8 hidden neurons, 1 output.

Features:
    - Connections coloured by weight sign (green positive, red negative)
    - Connection brightness = min(|weight| * source activation, 1)
    - Neurons tinted from gray to green by activation, smoothed between frames
    - Input and output labels with live values

Reads the network only through a NetworkView, so drawing can never
change what the network has learned.
"""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np
import pygame
import pygame.gfxdraw

import sys
sys.path.append('../..')
from config import Config
from src.ai.network import NetworkView

Color = Tuple[int, int, int]


def connection_intensity(weight: float, activation: float) -> float:
    """Brightness of a connection: min(|weight| * activation, 1)."""
    return min(abs(weight) * activation, 1.0)


class NeuralNetVisualizer:
    """
    Draws the network into a rectangular panel.

    Example:
        >>> visualizer = NeuralNetVisualizer(session.view, config, x=400, y=0, width=320, height=600)
        >>> visualizer.render(screen)
    """

    def __init__(
        self,
        view: NetworkView,
        config: Optional[Config] = None,
        x: int = 0,
        y: int = 0,
        width: int = 320,
        height: int = 400
    ):
        """
        Initialize the visualizer.

        Args:
            view: Read-only handle on the network to draw
            config: Configuration object
            x: X position of visualization area
            y: Y position of visualization area
            width: Width of visualization area
            height: Height of visualization area
        """
        self.view = view
        self.config = config or Config()
        self.x = x
        self.y = y
        self.width = width
        self.height = height

        self.neuron_radius = self.config.VIS_NEURON_RADIUS
        self.input_labels = list(self.config.VIS_INPUT_LABELS)
        self.output_labels = list(self.config.VIS_OUTPUT_LABELS)

        self.bg_color = (12, 12, 24)
        self.panel_color = (18, 18, 32)
        self.text_color = (200, 200, 220)
        self.inactive_color: Color = self.config.VIS_COLOR_INACTIVE
        self.active_color: Color = self.config.VIS_COLOR_ACTIVE
        self.weight_positive: Color = self.config.VIS_COLOR_WEIGHT_POS
        self.weight_negative: Color = self.config.VIS_COLOR_WEIGHT_NEG

        pygame.font.init()
        self.font_small = pygame.font.Font(None, 18)
        self.font_title = pygame.font.Font(None, 30)

        # Smooth activation interpolation
        self.prev_activations: Dict[str, np.ndarray] = {}
        self.interpolation_speed = 0.3

        self.pulse_phase = 0.0

        self._cached_gradient: Optional[pygame.Surface] = None
        self._create_gradient_surface()

        self.header_height = 45
        self.label_margin = 70  # Room for input labels on the left

    def render(self, screen: pygame.Surface) -> None:
        """Draw the panel using the network's latest activations."""
        layer_positions = self._calculate_layer_positions(self.view.get_layer_info())
        parameters = self.view.get_parameters()
        activations = self._smooth_activations(self.view.get_activations())

        self._draw_background(screen)
        self._draw_title(screen)
        self._draw_connections(screen, layer_positions, parameters, activations)
        self._draw_neurons(screen, layer_positions, activations)
        self._draw_labels(screen, layer_positions, activations)

        self.pulse_phase = (self.pulse_phase + 0.08) % (2 * math.pi)

    def _smooth_activations(self, activations: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """Interpolate activations for smoother animation."""
        smoothed = {}
        for key, new_act in activations.items():
            prev = self.prev_activations.get(key)
            if prev is not None and prev.shape == new_act.shape:
                smoothed[key] = prev + (new_act - prev) * self.interpolation_speed
            else:
                smoothed[key] = new_act
            self.prev_activations[key] = smoothed[key].copy()
        return smoothed

    def _create_gradient_surface(self) -> None:
        """Create and cache the gradient background surface."""
        self._cached_gradient = pygame.Surface((self.width, self.height))
        for i in range(self.height):
            t = i / self.height
            color = tuple(
                int(self.bg_color[c] + (self.panel_color[c] - self.bg_color[c]) * t) for c in range(3)
            )
            pygame.draw.line(self._cached_gradient, color, (0, i), (self.width, i))

    def _draw_background(self, screen: pygame.Surface) -> None:
        panel_rect = pygame.Rect(self.x, self.y, self.width, self.height)
        screen.blit(self._cached_gradient, (self.x, self.y))
        pygame.draw.rect(screen, (40, 60, 100), panel_rect, 2, border_radius=8)

    def _draw_title(self, screen: pygame.Surface) -> None:
        text = self.font_title.render("Neural Network", True, (100, 180, 255))
        screen.blit(text, text.get_rect(centerx=self.x + self.width // 2, top=self.y + 10))

    def _calculate_layer_positions(self, layer_info: List[Dict]) -> List[Dict]:
        """Calculate the position of each layer and its neurons."""
        num_layers = len(layer_info)

        left = self.x + self.label_margin
        right = self.x + self.width - 50
        layer_spacing = (right - left) / max(num_layers - 1, 1)

        network_top = self.y + self.header_height
        available_height = self.height - self.header_height - 20
        center_y = network_top + available_height / 2

        positions = []
        for i, info in enumerate(layer_info):
            layer_x = left + i * layer_spacing
            count = info['neurons']
            spacing = min(self.config.VIS_NEURON_SPACING, available_height / max(count, 1))
            start_y = center_y - (count - 1) * spacing / 2

            positions.append({
                'x': layer_x,
                'positions': [(layer_x, start_y + j * spacing) for j in range(count)],
                'type': info['type'],
                'name': info['name'],
            })
        return positions

    def connection_color(self, weight: float, activation: float) -> Color:
        """Weight-sign colour faded in by connection intensity."""
        target = self.weight_positive if weight > 0 else self.weight_negative
        return self._interpolate_color(self.panel_color, target,
                                       connection_intensity(weight, activation))

    def _draw_connections(
        self,
        screen: pygame.Surface,
        layer_positions: List[Dict],
        parameters: Dict[str, np.ndarray],
        activations: Dict[str, np.ndarray]
    ) -> None:
        """Draw input->hidden and hidden->output connections."""
        links = [
            (layer_positions[0], layer_positions[1], parameters['weightsIH'], activations['inputs']),
            (layer_positions[1], layer_positions[2], parameters['weightsHO'], activations['hidden']),
        ]
        for from_layer, to_layer, weights, source_acts in links:
            for fi, from_pos in enumerate(from_layer['positions']):
                for ti, to_pos in enumerate(to_layer['positions']):
                    weight = float(weights[fi, ti])
                    activation = float(source_acts[fi])
                    color = self.connection_color(weight, activation)
                    thickness = 2 if connection_intensity(weight, activation) > 0.5 else 1
                    self._draw_aa_line(screen, color, from_pos, to_pos, thickness)

    def _draw_neurons(
        self,
        screen: pygame.Surface,
        layer_positions: List[Dict],
        activations: Dict[str, np.ndarray]
    ) -> None:
        """Draw neurons tinted by activation."""
        keys = ('inputs', 'hidden', 'output')
        for layer_pos, key in zip(layer_positions, keys):
            layer_acts = activations[key]
            for j, pos in enumerate(layer_pos['positions']):
                act_val = float(np.clip(layer_acts[j], 0.0, 1.0))
                color = self._interpolate_color(self.inactive_color, self.active_color, act_val)

                radius = self.neuron_radius
                center = (int(pos[0]), int(pos[1]))

                # Glow on the output neuron when it would flap
                if key == 'output' and act_val > self.config.DECISION_THRESHOLD:
                    glow = 1 + 0.15 * math.sin(self.pulse_phase * 2)
                    self._draw_aa_circle(screen, (30, 100, 60), center, int((radius + 5) * glow))

                self._draw_aa_circle(screen, color, center, radius)
                self._draw_aa_circle(screen, (80, 90, 110), center, radius, border=1)

    def _draw_labels(
        self,
        screen: pygame.Surface,
        layer_positions: List[Dict],
        activations: Dict[str, np.ndarray]
    ) -> None:
        """Input names on the left, output name and value on the right."""
        for label, value, pos in zip(self.input_labels, activations['inputs'],
                                     layer_positions[0]['positions']):
            text = self.font_small.render(f"{label} {value:.2f}", True, self.text_color)
            rect = text.get_rect(right=int(pos[0]) - self.neuron_radius - 4, centery=int(pos[1]))
            screen.blit(text, rect)

        for label, value, pos in zip(self.output_labels, activations['output'],
                                     layer_positions[-1]['positions']):
            text = self.font_small.render(f"{label} {value:.2f}", True, self.text_color)
            rect = text.get_rect(centerx=int(pos[0]), top=int(pos[1]) + self.neuron_radius + 4)
            screen.blit(text, rect)

    def _interpolate_color(
        self,
        color1: Color,
        color2: Color,
        t: float
    ) -> Color:
        """Linear interpolation between two colors, t clamped to [0, 1]."""
        t = max(0.0, min(1.0, t))
        r = int(color1[0] + (color2[0] - color1[0]) * t)
        g = int(color1[1] + (color2[1] - color1[1]) * t)
        b = int(color1[2] + (color2[2] - color1[2]) * t)
        return (r, g, b)

    def _draw_aa_circle(
        self,
        screen: pygame.Surface,
        color: Color,
        pos: Tuple[int, int],
        radius: int,
        border: int = 0
    ) -> None:
        """Draw an anti-aliased circle using pygame.gfxdraw."""
        x, y = int(pos[0]), int(pos[1])
        r = max(1, int(radius))
        pygame.gfxdraw.aacircle(screen, x, y, r, color)
        if border == 0:
            pygame.gfxdraw.filled_circle(screen, x, y, r, color)

    def _draw_aa_line(
        self,
        screen: pygame.Surface,
        color: Color,
        start: Tuple[float, float],
        end: Tuple[float, float],
        thickness: int = 1
    ) -> None:
        """Draw an anti-aliased line with optional thickness."""
        x1, y1 = int(start[0]), int(start[1])
        x2, y2 = int(end[0]), int(end[1])
        pygame.draw.aaline(screen, color, (x1, y1), (x2, y2))
        for offset in range(1, thickness):
            pygame.draw.aaline(screen, color, (x1, y1 + offset), (x2, y2 + offset))

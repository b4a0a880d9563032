"""Feature-to-mix-weight mapping as a small fixed feed-forward network.

Topology is 8 -> 16 (relu) -> 8 (relu) -> 4 (linear). The network is not
trained. The default parameters are hand-set constants:

- layer 1 passes every feature through unchanged and adds its complement
  `1 - x` (inputs are clamped to [0, 1], so relu is exact here);
- layer 2 combines those into eight descriptors (spatial spread, density,
  headroom, correlation, level, brightness, body, narrowness);
- layer 3 produces raw left/right blend, side gain and harmonic gain.

`seeded_layers` builds an alternative Xavier-uniform parameterization from
a fixed seed for experiments; the same seed always yields the same tables.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Sequence

import numpy as np

from .errors import ValidationError


INPUT_SIZE = 8
HIDDEN_SIZES = (16, 8)
OUTPUT_SIZE = 4

BLEND_RANGE = (0.3, 0.7)
SIDE_GAIN_RANGE = (0.0, 0.5)
HARMONIC_GAIN_RANGE = (0.0, 0.3)

# Input feature indices.
_WIDTH, _RICHNESS, _RMS, _PEAK, _PHASE, _LOW, _MID, _HIGH = range(INPUT_SIZE)


ACTIVATIONS: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "relu": lambda x: np.maximum(x, 0.0),
    "tanh": np.tanh,
    "sigmoid": lambda x: 1.0 / (1.0 + np.exp(-x)),
    "linear": lambda x: x,
}


@dataclass(frozen=True, slots=True)
class DenseLayer:
    """Fully connected layer: `activation(weights @ x + biases)`."""

    weights: np.ndarray  # [outputs, inputs]
    biases: np.ndarray  # [outputs]
    activation: str = "relu"

    def __post_init__(self) -> None:
        w = np.array(self.weights, dtype=np.float64)
        b = np.array(self.biases, dtype=np.float64).reshape(-1)
        if w.ndim != 2 or w.shape[0] != b.shape[0]:
            raise ValidationError(f"Layer shape mismatch: weights {w.shape}, biases {b.shape}")
        if self.activation not in ACTIVATIONS:
            raise ValidationError(f"Unknown activation: {self.activation}")
        w.flags.writeable = False
        b.flags.writeable = False
        object.__setattr__(self, "weights", w)
        object.__setattr__(self, "biases", b)

    @property
    def input_size(self) -> int:
        return int(self.weights.shape[1])

    @property
    def output_size(self) -> int:
        return int(self.weights.shape[0])

    def forward(self, x: np.ndarray) -> np.ndarray:
        return ACTIVATIONS[self.activation](self.biases + self.weights @ x)


class FeedForwardNetwork:
    """Chain of dense layers evaluated in order."""

    def __init__(self, layers: Sequence[DenseLayer]) -> None:
        if not layers:
            raise ValidationError("Network needs at least one layer")
        for prev, nxt in zip(layers, layers[1:]):
            if prev.output_size != nxt.input_size:
                raise ValidationError(
                    f"Layer size mismatch: {prev.output_size} outputs feed {nxt.input_size} inputs"
                )
        self.layers = tuple(layers)

    @property
    def sizes(self) -> tuple[int, ...]:
        return (self.layers[0].input_size, *(layer.output_size for layer in self.layers))

    def forward(self, x: np.ndarray) -> np.ndarray:
        current = np.asarray(x, dtype=np.float64).reshape(-1)
        if current.shape[0] != self.layers[0].input_size:
            raise ValidationError(
                f"Expected {self.layers[0].input_size} inputs, got {current.shape[0]}"
            )
        for layer in self.layers:
            current = layer.forward(current)
        return current


def default_layers() -> list[DenseLayer]:
    """Hand-set parameters for the 8 -> 16 -> 8 -> 4 mapping."""
    eye = np.eye(INPUT_SIZE)
    w1 = np.vstack([eye, -eye])
    b1 = np.concatenate([np.zeros(INPUT_SIZE), np.ones(INPUT_SIZE)])

    # Columns 0-7 carry x, columns 8-15 carry 1 - x.
    comp = INPUT_SIZE
    w2 = np.zeros((HIDDEN_SIZES[1], HIDDEN_SIZES[0]))
    w2[0, _WIDTH] = 0.5
    w2[0, comp + _PHASE] = 0.5  # spatial spread
    w2[1, _RICHNESS] = 0.5
    w2[1, _HIGH] = 0.5  # density
    w2[2, comp + _PEAK] = 1.0  # headroom
    w2[3, _PHASE] = 1.0  # correlation
    w2[4, _RMS] = 1.0  # level
    w2[5, _MID] = 0.5
    w2[5, _HIGH] = 0.5  # brightness
    w2[6, _LOW] = 1.0  # body
    w2[7, comp + _WIDTH] = 1.0  # narrowness
    b2 = np.zeros(HIDDEN_SIZES[1])

    w3 = np.array(
        [
            [0.6, 0.0, 0.2, 0.0, 0.0, 0.0, 0.0, 0.0],
            [0.6, 0.0, 0.2, 0.0, 0.0, 0.0, 0.0, 0.0],
            [0.8, 0.2, 0.0, -0.1, 0.0, 0.0, 0.0, 0.0],
            [0.0, 0.3, 0.0, 0.0, 0.0, 0.1, -0.05, 0.0],
        ]
    )
    b3 = np.array([-0.1, -0.1, 0.0, 0.0])

    return [
        DenseLayer(w1, b1, "relu"),
        DenseLayer(w2, b2, "relu"),
        DenseLayer(w3, b3, "linear"),
    ]


def seeded_layers(seed: int = 42, emphasis: float = 1.2) -> list[DenseLayer]:
    """Xavier-uniform parameters drawn from a fixed seed.

    Weights on the first five input columns of each layer (width, richness,
    level and correlation on the first layer) are scaled by `emphasis`.
    """
    rng = np.random.default_rng(seed)
    sizes = (INPUT_SIZE, *HIDDEN_SIZES, OUTPUT_SIZE)
    layers: list[DenseLayer] = []
    for idx, (n_in, n_out) in enumerate(zip(sizes[:-1], sizes[1:])):
        scale = np.sqrt(2.0 / (n_in + n_out))
        w = rng.uniform(-1.0, 1.0, size=(n_out, n_in)) * scale
        w[:, :5] *= emphasis
        b = rng.uniform(-1.0, 1.0, size=n_out) * 0.01
        activation = "linear" if idx == len(sizes) - 2 else "relu"
        layers.append(DenseLayer(w, b, activation))
    return layers


@dataclass(frozen=True, slots=True)
class MixWeights:
    """Per-conversion blend parameters, each clamped to its documented range."""

    left_weight: float
    right_weight: float
    side_gain: float
    harmonic_gain: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.left_weight, self.right_weight, self.side_gain, self.harmonic_gain))

    def as_dict(self) -> dict[str, float]:
        return {
            "left_weight": self.left_weight,
            "right_weight": self.right_weight,
            "side_gain": self.side_gain,
            "harmonic_gain": self.harmonic_gain,
        }


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    # Rounded to float32 like the sample buffers, then held inside the bounds.
    return min(bounds[1], max(bounds[0], float(np.float32(value))))


class WeightMapper:
    """Pure mapping from an 8-feature vector to MixWeights.

    The network tables are read-only after construction; one instance can
    serve concurrent callers.
    """

    def __init__(self, network: FeedForwardNetwork | None = None) -> None:
        self.network = network or FeedForwardNetwork(default_layers())
        sizes = self.network.sizes
        if sizes[0] != INPUT_SIZE or sizes[-1] != OUTPUT_SIZE:
            raise ValidationError(f"Network must map {INPUT_SIZE} -> {OUTPUT_SIZE}, got {sizes}")

    @classmethod
    def from_seed(cls, seed: int) -> "WeightMapper":
        return cls(FeedForwardNetwork(seeded_layers(seed)))

    def map_features(self, features: Sequence[float] | np.ndarray) -> MixWeights:
        x = np.asarray(features, dtype=np.float32).reshape(-1)
        if x.shape[0] != INPUT_SIZE:
            raise ValidationError(f"Expected {INPUT_SIZE} features, got {x.shape[0]}")
        x = np.clip(x, 0.0, 1.0)
        raw = self.network.forward(x)
        return MixWeights(
            left_weight=_clamp(0.5 + float(raw[0]) * 0.2, BLEND_RANGE),
            right_weight=_clamp(0.5 + float(raw[1]) * 0.2, BLEND_RANGE),
            side_gain=_clamp(float(raw[2]), SIDE_GAIN_RANGE),
            harmonic_gain=_clamp(float(raw[3]), HARMONIC_GAIN_RANGE),
        )

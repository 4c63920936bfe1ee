import numbers

import numpy as np

from shave.matrix import ShapeMismatch, add, apply, as_matrix, column, dot, multiply, scale, subtract
from shave.truncation import DEFAULT_MANTISSA_BITS, TruncationConfig, truncate_array


# =============================================================================
# Activation
# =============================================================================


def sigmoid(z):
    """Logistic function 1 / (1 + e^-z), elementwise."""
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-z))


def sigmoid_prime(activations):
    """Sigmoid derivative expressed through its own output: a * (1 - a)."""
    activations = as_matrix(activations)
    return multiply(activations, subtract(np.ones_like(activations), activations))


# =============================================================================
# Initialization
# =============================================================================


def random_weights(rows, cols, fan_in, rng=None):
    """Draw a (rows, cols) matrix from Uniform[-1/sqrt(fan_in), 1/sqrt(fan_in)]."""
    if rng is None:
        rng = np.random.default_rng()
    bound = 1.0 / np.sqrt(fan_in)
    return rng.uniform(-bound, bound, size=(rows, cols))


# =============================================================================
# Network
# =============================================================================


class Network:
    """Three-layer sigmoid MLP trained one example at a time on truncated weights.

    `predict` truncates every intermediate tensor to the configured width.
    `train` runs its forward pass at full precision and truncates only the
    committed weights.
    """

    def __init__(
        self,
        input_count: int,
        hidden_count: int,
        output_count: int,
        learning_rate: float,
        mantissa_bits: int = DEFAULT_MANTISSA_BITS,
        seed=None,
        weights=None,
    ):
        """
        Args:
            weights: Optional (hidden_weights, output_weights) pair used instead
                of a random draw. Copied; shapes must match the layer sizes.
        """
        for name, count in (("input_count", input_count), ("hidden_count", hidden_count),
                            ("output_count", output_count)):
            if isinstance(count, bool) or not isinstance(count, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {count!r}")
            if count <= 0:
                raise ValueError(f"{name} must be positive, got {count}")
        if learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {learning_rate}")

        self.input_count = int(input_count)
        self.hidden_count = int(hidden_count)
        self.output_count = int(output_count)
        self.learning_rate = float(learning_rate)
        self.truncation = TruncationConfig(mantissa_bits)

        if weights is None:
            rng = np.random.default_rng(seed)
            self.hidden_weights = random_weights(self.hidden_count, self.input_count, self.input_count, rng)
            self.output_weights = random_weights(self.output_count, self.hidden_count, self.hidden_count, rng)
        else:
            hidden_weights, output_weights = (as_matrix(w).copy() for w in weights)
            for name, matrix, expected in (
                ("hidden_weights", hidden_weights, (self.hidden_count, self.input_count)),
                ("output_weights", output_weights, (self.output_count, self.hidden_count)),
            ):
                if matrix.shape != expected:
                    raise ShapeMismatch(f"{name} has shape {matrix.shape}, expected {expected}")
            self.hidden_weights = hidden_weights
            self.output_weights = output_weights

        # Initial spread, kept for comparison against the trained weights
        self.hidden_min = float(self.hidden_weights.min())
        self.hidden_max = float(self.hidden_weights.max())
        self.output_min = float(self.output_weights.min())
        self.output_max = float(self.output_weights.max())

    @classmethod
    def from_weights(cls, hidden_weights, output_weights, learning_rate, mantissa_bits=DEFAULT_MANTISSA_BITS):
        """Build a network around explicit weight matrices (copied).

        The given matrices count as the initial weights for `hidden_min` and friends.
        """
        hidden_weights = as_matrix(hidden_weights)
        output_weights = as_matrix(output_weights)
        if output_weights.shape[1] != hidden_weights.shape[0]:
            raise ShapeMismatch(
                f"Output weights {output_weights.shape} do not follow hidden weights {hidden_weights.shape}"
            )
        hidden_count, input_count = hidden_weights.shape
        return cls(input_count, hidden_count, output_weights.shape[0], learning_rate, mantissa_bits,
                   weights=(hidden_weights, output_weights))

    @property
    def mantissa_bits(self):
        return self.truncation.mantissa_bits

    @property
    def sizes(self):
        return [self.input_count, self.hidden_count, self.output_count]

    def with_mantissa_bits(self, mantissa_bits):
        """Copy of this network (weights included) at another truncation width.

        The copy keeps this network's initial weight ranges.
        """
        net = Network.from_weights(self.hidden_weights, self.output_weights, self.learning_rate, mantissa_bits)
        net.hidden_min, net.hidden_max = self.hidden_min, self.hidden_max
        net.output_min, net.output_max = self.output_min, self.output_max
        return net

    def _truncate(self, m):
        return truncate_array(m, self.mantissa_bits)

    def predict(self, inputs):
        """Forward pass with every stage truncated; returns an (output_count, 1) matrix."""
        x = column(inputs, self.input_count)
        hidden_inputs = self._truncate(dot(self.hidden_weights, x))
        hidden_outputs = self._truncate(apply(sigmoid, hidden_inputs))
        final_inputs = self._truncate(dot(self.output_weights, hidden_outputs))
        return self._truncate(apply(sigmoid, final_inputs))

    def predict_class(self, inputs):
        """Index of the strongest output; the earliest index wins ties."""
        return int(np.argmax(self.predict(inputs)[:, 0]))

    def train(self, inputs, targets):
        """One backpropagation step on a single example.

        Returns:
            Sum of squared output errors before the update
        """
        x = column(inputs, self.input_count)
        t = column(targets, self.output_count)

        # Forward pass stays at full precision
        hidden_outputs = apply(sigmoid, dot(self.hidden_weights, x))
        final_outputs = apply(sigmoid, dot(self.output_weights, hidden_outputs))

        output_errors = subtract(t, final_outputs)
        hidden_errors = dot(self.output_weights.T, output_errors)

        self.output_weights = add(
            self.output_weights,
            scale(self.learning_rate,
                  dot(multiply(output_errors, sigmoid_prime(final_outputs)), hidden_outputs.T)),
        )
        self.hidden_weights = add(
            self.hidden_weights,
            scale(self.learning_rate,
                  dot(multiply(hidden_errors, sigmoid_prime(hidden_outputs)), x.T)),
        )
        self.truncate_weights()

        return float(np.sum(output_errors ** 2))

    def truncate_weights(self):
        """Truncate both weight matrices in place to the configured width."""
        truncate_array(self.output_weights, self.mantissa_bits, out=self.output_weights)
        truncate_array(self.hidden_weights, self.mantissa_bits, out=self.hidden_weights)

    def weight_ranges(self):
        """Current (min, max) of each weight matrix."""
        return {
            "hidden": (float(self.hidden_weights.min()), float(self.hidden_weights.max())),
            "output": (float(self.output_weights.min()), float(self.output_weights.max())),
        }

"""
Shave: training a sigmoid MLP on hardware with a truncated float mantissa.
"""

# Submodules
from shave import datasets, matrix, models, persistence, plotting, training, truncation

# Truncation
from shave.truncation import (
    DEFAULT_MANTISSA_BITS,
    InvalidTruncationWidth,
    TruncationConfig,
    truncate_array,
    truncate_mantissa,
    validate_mantissa_bits,
)

# Matrix primitives
from shave.matrix import ShapeMismatch

# Models
from shave.models import Network, sigmoid, sigmoid_prime

# Training
from shave.training import evaluate, sweep_mantissa_bits, train_network

# Datasets
from shave.datasets import (
    input_from_image,
    load_mnist_csv,
    load_mnist_torchvision,
    one_hot,
    pixels_to_input,
)

# Persistence
from shave.persistence import load_matrix, load_network, save_matrix, save_network

# Plotting
from shave.plotting import PlotLogger, plot_accuracy_by_bits, save_accuracy_plot

__all__ = [
    # Submodules
    "datasets",
    "matrix",
    "models",
    "persistence",
    "plotting",
    "training",
    "truncation",
    # Truncation
    "DEFAULT_MANTISSA_BITS",
    "InvalidTruncationWidth",
    "TruncationConfig",
    "truncate_array",
    "truncate_mantissa",
    "validate_mantissa_bits",
    # Matrix primitives
    "ShapeMismatch",
    # Models
    "Network",
    "sigmoid",
    "sigmoid_prime",
    # Training
    "evaluate",
    "sweep_mantissa_bits",
    "train_network",
    # Datasets
    "input_from_image",
    "load_mnist_csv",
    "load_mnist_torchvision",
    "one_hot",
    "pixels_to_input",
    # Persistence
    "load_matrix",
    "load_network",
    "save_matrix",
    "save_network",
    # Plotting
    "PlotLogger",
    "plot_accuracy_by_bits",
    "save_accuracy_plot",
]

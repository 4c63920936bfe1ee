"""
persistence.py
~~~~~~~~~~~~~~

Weight-file persistence for `Network`.

Each weight matrix is stored in its own file as a NumPy ``.npy`` blob
(shape, dtype and raw float64 values).
"""

import io
import logging
import os

import numpy as np

from shave.matrix import ShapeMismatch

log = logging.getLogger(__name__)

HIDDEN_WEIGHTS_FILE = 'hweights.model'
OUTPUT_WEIGHTS_FILE = 'oweights.model'


def save_matrix(matrix) -> bytes:
    """Serialize a matrix to bytes."""
    buffer = io.BytesIO()
    np.save(buffer, np.asarray(matrix, dtype=np.float64), allow_pickle=False)
    return buffer.getvalue()


def load_matrix(data: bytes) -> np.ndarray:
    """
    Deserialize a matrix produced by `save_matrix`.

    Raises:
        ValueError: If the blob is not a 2-D numeric array
    """
    matrix = np.load(io.BytesIO(data), allow_pickle=False)
    if matrix.ndim != 2:
        raise ValueError(f"Expected a 2-D weight matrix, got {matrix.ndim} dimensions")
    return matrix.astype(np.float64)


def save_network(network, model_dir: str = 'data') -> None:
    """
    Write both weight matrices of `network` into `model_dir`.

    Args:
        network: Network whose weights are saved
        model_dir: Directory for the weight files (created if missing)
    """
    os.makedirs(model_dir, exist_ok=True)
    for filename, matrix in ((HIDDEN_WEIGHTS_FILE, network.hidden_weights),
                             (OUTPUT_WEIGHTS_FILE, network.output_weights)):
        path = os.path.join(model_dir, filename)
        with open(path, 'wb') as f:
            f.write(save_matrix(matrix))
        log.info(f"Saved {matrix.shape[0]}x{matrix.shape[1]} weights to {path}")


def load_network(network, model_dir: str = 'data') -> bool:
    """
    Replace the weights of `network` with those stored in `model_dir`.

    A missing weight file leaves that matrix untouched.

    Args:
        network: Network to update in place
        model_dir: Directory holding the weight files

    Returns:
        bool: True if both matrices were loaded

    Raises:
        ShapeMismatch: If a stored matrix does not fit the network
    """
    loaded = 0
    for filename, attr in ((HIDDEN_WEIGHTS_FILE, 'hidden_weights'),
                           (OUTPUT_WEIGHTS_FILE, 'output_weights')):
        path = os.path.join(model_dir, filename)
        if not os.path.exists(path):
            log.warning(f"Weight file {path} not found; keeping current {attr}")
            continue

        with open(path, 'rb') as f:
            matrix = load_matrix(f.read())

        expected = getattr(network, attr).shape
        if matrix.shape != expected:
            raise ShapeMismatch(f"{path} holds a {matrix.shape} matrix, network expects {expected}")

        setattr(network, attr, matrix)
        loaded += 1
        log.info(f"Loaded {attr} from {path}")

    return loaded == 2

import logging

import numpy as np
import pandas as pd
from PIL import Image
from sklearn.model_selection import train_test_split

log = logging.getLogger(__name__)

IMAGE_SIDE = 28
INPUT_SIZE = IMAGE_SIDE * IMAGE_SIDE
NUM_CLASSES = 10

# Pixels are squeezed into [0.001, 1.0] so the sigmoid never sees 0 or 1
PIXEL_SCALE = 0.999
PIXEL_OFFSET = 0.001


# =============================================================================
# Scaling and targets
# =============================================================================


def scale_pixels(pixels):
    """Map bytes 0..255 (high = ink) to p/255 * 0.999 + 0.001."""
    pixels = np.asarray(pixels, dtype=np.float64)
    return pixels / 255.0 * PIXEL_SCALE + PIXEL_OFFSET


def pixels_to_input(pixels):
    """Map grayscale bytes (low = ink) to ((255 - p)/255) * 0.999 + 0.001.

    Drawn images are dark-on-light while MNIST stores ink as high values,
    so the bytes are inverted before scaling.
    """
    pixels = np.asarray(pixels, dtype=np.float64)
    return (255.0 - pixels) / 255.0 * PIXEL_SCALE + PIXEL_OFFSET


def one_hot(label, num_classes=NUM_CLASSES, on=0.9, off=0.1):
    """Target vector with `on` at `label` and `off` everywhere else."""
    label = int(label)
    if not 0 <= label < num_classes:
        raise ValueError(f"Label {label} out of range for {num_classes} classes")
    targets = np.full(num_classes, off, dtype=np.float64)
    targets[label] = on
    return targets


# =============================================================================
# Images
# =============================================================================


def input_from_image(path):
    """
    Read a PNG and return its pixels as a network input vector.

    The image is converted to 8-bit grayscale and flattened row by row.

    Args:
        path: Path to the image (28 x 28 for the default network)

    Returns:
        inputs: float64 array of shape (width * height,)
    """
    with Image.open(path) as img:
        gray = np.asarray(img.convert("L"), dtype=np.uint8)
    return pixels_to_input(gray.reshape(-1))


# =============================================================================
# MNIST
# =============================================================================


def load_mnist_csv(path, limit=None):
    """
    Load MNIST from the CSV layout `label, p0, ..., p783`.

    Args:
        path: CSV file without a header row
        limit: Only read the first `limit` rows

    Returns:
        X: Scaled inputs, shape (n_samples, 784)
        y: Integer labels, shape (n_samples,)
    """
    frame = pd.read_csv(path, header=None, nrows=limit)
    if frame.shape[1] < 2:
        raise ValueError(f"{path}: expected a label column followed by pixel columns")

    y = frame.iloc[:, 0].to_numpy(dtype=np.int64)
    X = scale_pixels(frame.iloc[:, 1:].to_numpy(dtype=np.float64))
    log.info(f"Loaded {len(y)} samples with {X.shape[1]} inputs from {path}")
    return X, y


def load_mnist_torchvision(data_dir='./data', train=True, limit=None):
    """
    Download (if needed) and load MNIST through torchvision.

    Returns the same (X, y) layout and scaling as `load_mnist_csv`.
    """
    from torchvision import datasets

    data = datasets.MNIST(data_dir, train=train, download=True)
    images = data.data.numpy().reshape(len(data), -1)
    labels = data.targets.numpy().astype(np.int64)
    if limit is not None:
        images, labels = images[:limit], labels[:limit]

    X = scale_pixels(images)
    log.info(f"Loaded {len(labels)} {'training' if train else 'test'} samples from torchvision MNIST")
    return X, labels


def split_dataset(X, y, test_size=0.2, random_state=None, stratify=True):
    """Train/test split; returns X_train, X_test, y_train, y_test."""
    return train_test_split(
        X, y, test_size=test_size, random_state=random_state, stratify=y if stratify else None
    )

"""Training and evaluation loops for truncated-precision networks."""

import logging

import numpy as np

from shave.datasets import one_hot

log = logging.getLogger(__name__)


def evaluate(network, X, y):
    """Fraction of samples whose predicted class matches the label."""
    if len(y) == 0:
        return 0.0
    correct = sum(network.predict_class(x) == int(label) for x, label in zip(X, y))
    return correct / len(y)


def train_network(network, X_train, y_train, epochs=1, X_test=None, y_test=None,
                  target_on=0.9, target_off=0.1, shuffle=True, seed=None, plot_logger=None):
    """Train example by example for a number of epochs.

    After each epoch the mean squared error is recorded and, when a test set
    is given, the test accuracy at the network's truncation width.

    Args:
        network: Network to train in place
        X_train: Inputs, shape (n_samples, input_count)
        y_train: Integer class labels, shape (n_samples,)
        epochs: Passes over the training set
        X_test, y_test: Optional held-out set evaluated after each epoch
        target_on, target_off: Target values for the true and the other classes
        shuffle: Visit the training samples in a fresh random order each epoch
        seed: Seed for the shuffling order
        plot_logger: Optional PlotLogger receiving (epoch, mean_error, accuracy) rows

    Returns:
        List of per-epoch dicts with keys epoch, mean_error and accuracy
    """
    rng = np.random.default_rng(seed)
    history = []

    for epoch in range(1, epochs + 1):
        order = rng.permutation(len(y_train)) if shuffle else np.arange(len(y_train))
        total_error = 0.0
        for i in order:
            targets = one_hot(y_train[i], network.output_count, on=target_on, off=target_off)
            total_error += network.train(X_train[i], targets)
        mean_error = total_error / max(len(order), 1)

        accuracy = None
        if X_test is not None and y_test is not None:
            accuracy = evaluate(network, X_test, y_test)

        history.append({"epoch": epoch, "mean_error": mean_error, "accuracy": accuracy})
        if accuracy is None:
            log.info(f"Epoch {epoch}/{epochs} | Error: {mean_error:.6f}")
        else:
            log.info(f"Epoch {epoch}/{epochs} | Error: {mean_error:.6f} | Accuracy: {accuracy:.4f}")
        if plot_logger is not None:
            plot_logger.log(epoch, mean_error, accuracy)

    return history


def sweep_mantissa_bits(network, X, y, bit_widths):
    """
    Accuracy of a trained network re-evaluated at several truncation widths.

    The weights are copied for each width; `network` itself is not modified.

    Returns:
        Dict mapping truncation width -> accuracy
    """
    results = {}
    for bits in bit_widths:
        truncated = network.with_mantissa_bits(bits)
        truncated.truncate_weights()
        results[int(bits)] = evaluate(truncated, X, y)
        log.info(f"Bits: {bits:2d} | Accuracy: {results[int(bits)]:.4f}")
    return results

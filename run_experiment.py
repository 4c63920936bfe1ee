"""
Experiment runner for reduced-mantissa MLP training.

Usage:
    # Train on MNIST CSV files with 24 truncated mantissa bits
    python run_experiment.py mode=train mantissa_bits=24

    # Evaluate previously saved weights on the test set
    python run_experiment.py mode=predict

    # Classify a single 28x28 PNG with saved weights
    python run_experiment.py mode=image image_path=digits/3.png

    # Re-evaluate saved weights across truncation widths
    python run_experiment.py mode=sweep sweep_bits=[0,16,24,32,40,44,48]

    # Sweep training over widths and seeds
    python run_experiment.py -m mantissa_bits=0,24,36,44 seed=42,123
"""

import json
import logging
import os

import hydra
from hydra.core.hydra_config import HydraConfig
from omegaconf import DictConfig, OmegaConf

from shave.datasets import input_from_image, load_mnist_csv, load_mnist_torchvision, split_dataset
from shave.models import Network
from shave.persistence import load_network, save_network
from shave.plotting import PlotLogger, save_accuracy_plot
from shave.training import evaluate, sweep_mantissa_bits, train_network

log = logging.getLogger(__name__)


def build_network(cfg: DictConfig, mantissa_bits=None):
    return Network(
        input_count=cfg.model.input_count,
        hidden_count=cfg.model.hidden_count,
        output_count=cfg.model.output_count,
        learning_rate=cfg.model.learning_rate,
        mantissa_bits=cfg.mantissa_bits if mantissa_bits is None else mantissa_bits,
        seed=cfg.seed,
    )


def load_data(cfg: DictConfig):
    """Return X_train, y_train, X_test, y_test for the configured source."""
    if cfg.data.source == "torchvision":
        X_train, y_train = load_mnist_torchvision(cfg.data.data_dir, train=True, limit=cfg.data.limit)
        X_test, y_test = load_mnist_torchvision(cfg.data.data_dir, train=False, limit=cfg.data.test_limit)
    elif cfg.data.source == "csv":
        X_train, y_train = load_mnist_csv(cfg.data.train_csv, limit=cfg.data.limit)
        if cfg.data.test_csv:
            X_test, y_test = load_mnist_csv(cfg.data.test_csv, limit=cfg.data.test_limit)
        else:
            X_train, X_test, y_train, y_test = split_dataset(
                X_train, y_train, test_size=cfg.data.test_size, random_state=cfg.seed
            )
    else:
        raise ValueError(f"Unknown data source: {cfg.data.source}")

    log.info(f"Train: {len(y_train)}, Test: {len(y_test)}")
    return X_train, y_train, X_test, y_test


def load_trained_network(cfg: DictConfig, mantissa_bits=None):
    net = build_network(cfg, mantissa_bits)
    if not load_network(net, cfg.model_dir):
        log.warning(f"No complete set of weights in {cfg.model_dir}; using untrained weights")
    return net


# =============================================================================
# Modes
# =============================================================================


def run_train(cfg: DictConfig):
    X_train, y_train, X_test, y_test = load_data(cfg)
    net = build_network(cfg)

    log.info(f"Network: {net.sizes}, lr={net.learning_rate}, bits={net.mantissa_bits}")
    log.info(
        f"Initial weight range: hidden [{net.hidden_min:.4f}, {net.hidden_max:.4f}], "
        f"output [{net.output_min:.4f}, {net.output_max:.4f}]"
    )

    plot_logger = PlotLogger(header=["epoch", "mean_error", "accuracy"])
    history = train_network(
        net, X_train, y_train, epochs=cfg.epochs, X_test=X_test, y_test=y_test,
        target_on=cfg.data.target_on, target_off=cfg.data.target_off,
        seed=cfg.seed, plot_logger=plot_logger,
    )

    ranges = net.weight_ranges()
    log.info(f"Final weight range: hidden {ranges['hidden']}, output {ranges['output']}")

    save_network(net, cfg.model_dir)
    plot_logger.save(cfg.plot_path)

    return {
        "accuracy": history[-1]["accuracy"] if history else None,
        "mean_error": history[-1]["mean_error"] if history else None,
        "history": history,
    }


def run_predict(cfg: DictConfig):
    _, _, X_test, y_test = load_data(cfg)
    net = load_trained_network(cfg)
    accuracy = evaluate(net, X_test, y_test)
    log.info(f"Accuracy: {accuracy:.4f}")
    return {"accuracy": accuracy}


def run_image(cfg: DictConfig):
    if not cfg.image_path:
        raise ValueError("mode=image requires image_path")
    net = load_trained_network(cfg)
    outputs = net.predict(input_from_image(cfg.image_path))
    prediction = int(outputs[:, 0].argmax())
    log.info(f"Outputs: {outputs[:, 0].tolist()}")
    log.info(f"Prediction for {cfg.image_path}: {prediction}")
    return {"prediction": prediction, "outputs": outputs[:, 0].tolist()}


def run_sweep(cfg: DictConfig):
    _, _, X_test, y_test = load_data(cfg)
    net = load_trained_network(cfg)
    accuracy_by_bits = sweep_mantissa_bits(net, X_test, y_test, list(cfg.sweep_bits))

    plot_logger = PlotLogger(header=["mantissa_bits", "accuracy"])
    for bits, accuracy in accuracy_by_bits.items():
        plot_logger.log(bits, accuracy)
    plot_logger.save(cfg.sweep_csv_path)
    save_accuracy_plot(accuracy_by_bits, cfg.sweep_plot_path)

    return {"accuracy_by_bits": {str(k): v for k, v in accuracy_by_bits.items()}}


MODES = {
    "train": run_train,
    "predict": run_predict,
    "image": run_image,
    "sweep": run_sweep,
}


# =============================================================================
# Main entry point
# =============================================================================


@hydra.main(version_base=None, config_path="configs", config_name="config")
def main(cfg: DictConfig):
    log.info(f"Config:\n{OmegaConf.to_yaml(cfg)}")
    log.info(f"Mode: {cfg.mode}")
    log.info(f"Seed: {cfg.seed}")
    log.info(f"Mantissa bits: {cfg.mantissa_bits}")

    if cfg.mode not in MODES:
        raise ValueError(f"Unknown mode: {cfg.mode}")
    results = MODES[cfg.mode](cfg)

    log.info(f"Results: {results}")
    results_path = os.path.join(HydraConfig.get().runtime.output_dir, "results.json")
    with open(results_path, "w") as f:
        json.dump({
            "config": OmegaConf.to_container(cfg, resolve=True),
            "results": results
        }, f, indent=2)

    return results.get("accuracy") or 0.0


if __name__ == "__main__":
    main()

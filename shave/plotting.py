import csv
import os

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


# =============================================================================
# CSV plot log
# =============================================================================


class PlotLogger:
    """Collects rows of (label, value, ...) tuples and writes them as CSV."""

    def __init__(self, header=None):
        self.header = list(header) if header is not None else None
        self.rows = []

    def log(self, *values):
        if self.header is not None and len(values) != len(self.header):
            raise ValueError(f"Expected {len(self.header)} values per row, got {len(values)}")
        self.rows.append(tuple(values))

    def __len__(self):
        return len(self.rows)

    def save(self, path):
        """Write the header (if any) and all rows to `path`."""
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            if self.header is not None:
                writer.writerow(self.header)
            writer.writerows(self.rows)


# =============================================================================
# Plotting
# =============================================================================


def plot_accuracy_by_bits(accuracy_by_bits, title, ax):
    """
    Plot prediction accuracy against truncation width.

    Args:
        accuracy_by_bits: Dict mapping truncation width -> accuracy in [0, 1]
        title: Plot title
        ax: Matplotlib axis to plot on
    """
    bits = sorted(accuracy_by_bits)
    accuracy = [accuracy_by_bits[b] for b in bits]

    ax.plot(bits, accuracy, marker="o")
    ax.set_xlabel("Truncated mantissa bits")
    ax.set_ylabel("Accuracy")
    ax.set_ylim(0.0, 1.0)
    ax.set_title(title)
    ax.grid(True, alpha=0.3)


def save_accuracy_plot(accuracy_by_bits, path, title="Accuracy vs. mantissa truncation"):
    """Render `plot_accuracy_by_bits` into a PNG at `path`."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig, ax = plt.subplots(figsize=(6, 4))
    plot_accuracy_by_bits(accuracy_by_bits, title, ax)
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)

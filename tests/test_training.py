import unittest

import numpy as np

from shave.models import Network
from shave.plotting import PlotLogger
from shave.training import evaluate, sweep_mantissa_bits, train_network


def make_two_class_data():
    X = np.array([
        [0.9, 0.1], [0.8, 0.2], [0.95, 0.15],
        [0.1, 0.9], [0.2, 0.8], [0.15, 0.95],
    ])
    y = np.array([0, 0, 0, 1, 1, 1])
    return X, y


class TrainingLoopTests(unittest.TestCase):
    def setUp(self):
        self.X, self.y = make_two_class_data()

    def test_learns_separable_problem(self):
        net = Network(2, 4, 2, learning_rate=0.5, mantissa_bits=0, seed=1)
        history = train_network(net, self.X, self.y, epochs=300, X_test=self.X, y_test=self.y, seed=1)

        self.assertEqual(len(history), 300)
        self.assertLess(history[-1]["mean_error"], history[0]["mean_error"])
        self.assertEqual(history[-1]["accuracy"], 1.0)

    def test_history_without_test_set(self):
        net = Network(2, 3, 2, learning_rate=0.5, seed=1)
        history = train_network(net, self.X, self.y, epochs=2, shuffle=False)

        self.assertEqual([h["epoch"] for h in history], [1, 2])
        self.assertIsNone(history[0]["accuracy"])
        self.assertGreater(history[0]["mean_error"], 0.0)

    def test_plot_logger_receives_one_row_per_epoch(self):
        net = Network(2, 3, 2, learning_rate=0.5, seed=1)
        plot_logger = PlotLogger(header=["epoch", "mean_error", "accuracy"])
        train_network(net, self.X, self.y, epochs=3, X_test=self.X, y_test=self.y, plot_logger=plot_logger)

        self.assertEqual(len(plot_logger), 3)
        self.assertEqual([row[0] for row in plot_logger.rows], [1, 2, 3])

    def test_same_seed_same_weights(self):
        a = Network(2, 3, 2, learning_rate=0.5, seed=4)
        b = Network(2, 3, 2, learning_rate=0.5, seed=4)
        train_network(a, self.X, self.y, epochs=3, seed=9)
        train_network(b, self.X, self.y, epochs=3, seed=9)
        np.testing.assert_array_equal(a.hidden_weights, b.hidden_weights)
        np.testing.assert_array_equal(a.output_weights, b.output_weights)


class EvaluationTests(unittest.TestCase):
    def test_evaluate_counts_matches(self):
        net = Network.from_weights(np.full((2, 2), 0.5), [[2.0, 2.0], [-2.0, -2.0]], 0.1)
        X = np.array([[0.5, 0.5], [0.1, 0.2], [0.9, 0.9]])
        # Output 0 always wins
        self.assertEqual(evaluate(net, X, np.array([0, 1, 0])), 2 / 3)

    def test_evaluate_empty(self):
        net = Network(2, 2, 2, learning_rate=0.1)
        self.assertEqual(evaluate(net, np.empty((0, 2)), np.empty(0, dtype=int)), 0.0)

    def test_sweep_returns_accuracy_per_width_and_keeps_network(self):
        X, y = make_two_class_data()
        net = Network(2, 4, 2, learning_rate=0.5, mantissa_bits=0, seed=1)
        train_network(net, X, y, epochs=100, seed=1)
        hidden_before = net.hidden_weights.copy()

        results = sweep_mantissa_bits(net, X, y, [0, 24, 48, 52])

        self.assertEqual(sorted(results), [0, 24, 48, 52])
        for accuracy in results.values():
            self.assertGreaterEqual(accuracy, 0.0)
            self.assertLessEqual(accuracy, 1.0)
        np.testing.assert_array_equal(net.hidden_weights, hidden_before)
        self.assertEqual(net.mantissa_bits, 0)

    def test_coarser_truncation_does_not_help_on_average(self):
        X, y = make_two_class_data()
        fine, coarse = [], []
        for seed in range(5):
            net = Network(2, 4, 2, learning_rate=0.5, mantissa_bits=0, seed=seed)
            train_network(net, X, y, epochs=300, seed=seed)
            results = sweep_mantissa_bits(net, X, y, [0, 52])
            fine.append(results[0])
            coarse.append(results[52])
        self.assertLessEqual(np.mean(coarse), np.mean(fine))


if __name__ == "__main__":
    unittest.main()

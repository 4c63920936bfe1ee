import csv
import unittest
import tempfile
from pathlib import Path

from shave.plotting import PlotLogger, save_accuracy_plot


class PlotLoggerTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_writes_header_and_rows(self):
        plot_logger = PlotLogger(header=["mantissa_bits", "accuracy"])
        plot_logger.log(24, 0.91)
        plot_logger.log(48, 0.42)
        path = self.tmp / "nested" / "plot.csv"

        plot_logger.save(str(path))

        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows, [["mantissa_bits", "accuracy"], ["24", "0.91"], ["48", "0.42"]])

    def test_without_header(self):
        plot_logger = PlotLogger()
        plot_logger.log("epoch 1", 0.5)
        path = self.tmp / "plot.csv"
        plot_logger.save(str(path))

        with open(path, newline="") as f:
            self.assertEqual(list(csv.reader(f)), [["epoch 1", "0.5"]])

    def test_row_width_checked_against_header(self):
        plot_logger = PlotLogger(header=["a", "b"])
        with self.assertRaises(ValueError):
            plot_logger.log(1, 2, 3)
        self.assertEqual(len(plot_logger), 0)

    def test_accuracy_plot_written(self):
        path = self.tmp / "accuracy.png"
        save_accuracy_plot({0: 0.95, 24: 0.94, 52: 0.3}, str(path))
        self.assertTrue(path.exists())
        self.assertGreater(path.stat().st_size, 0)

    def test_accuracy_plot_creates_parent_directory(self):
        path = self.tmp / "figures" / "sweep" / "accuracy.png"
        save_accuracy_plot({0: 0.95, 52: 0.3}, str(path))
        self.assertTrue(path.exists())


if __name__ == "__main__":
    unittest.main()

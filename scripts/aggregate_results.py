"""
Aggregate results from Hydra multirun training sweeps into a summary CSV.

Usage:
    python scripts/aggregate_results.py runs/train_sweep_*
    python scripts/aggregate_results.py runs/*_sweep_* --output bits_summary.csv
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd


def flatten_run(data: dict) -> dict:
    """Flatten one results.json payload (config + scalar results) into a row."""
    row = {}
    for k, v in data.get("config", {}).items():
        if isinstance(v, dict):
            for k2, v2 in v.items():
                row[f"{k}.{k2}"] = v2
        else:
            row[k] = v
    for k, v in data.get("results", {}).items():
        if not isinstance(v, (list, dict)):
            row[k] = v
    return row


def load_results(sweep_dir: Path) -> list[dict]:
    """Load all results.json files below a sweep directory."""
    results = []
    for results_file in sorted(sweep_dir.rglob("results.json")):
        try:
            with open(results_file) as f:
                row = flatten_run(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            print(f"Warning: Failed to load {results_file}: {e}")
            continue
        row["_file"] = str(results_file)
        results.append(row)
    return results


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Accuracy statistics per truncation width."""
    return (
        df.dropna(subset=["accuracy"])
        .groupby("mantissa_bits")["accuracy"]
        .agg(["mean", "std", "min", "max", "count"])
        .sort_index()
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("patterns", nargs="+", help="Sweep directories (glob patterns)")
    parser.add_argument("--output", default="sweep_results.csv")
    args = parser.parse_args(argv)

    all_results = []
    for pattern in args.patterns:
        for sweep_dir in Path(".").glob(pattern):
            if sweep_dir.is_dir():
                print(f"Loading results from {sweep_dir}...")
                results = load_results(sweep_dir)
                print(f"  Found {len(results)} runs")
                all_results.extend(results)

    if not all_results:
        print("No results found!")
        sys.exit(1)

    df = pd.DataFrame(all_results)
    print(f"\nTotal runs: {len(df)}")

    if "accuracy" in df.columns and "mantissa_bits" in df.columns:
        print("\nAccuracy by mantissa_bits:")
        print(summarize(df).to_string())

    df.to_csv(args.output, index=False)
    print(f"\nResults saved to {args.output}")

    return df


if __name__ == "__main__":
    main()

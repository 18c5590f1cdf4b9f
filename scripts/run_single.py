"""Run a single importance computation from a config file."""

from __future__ import annotations

import argparse

from featimp.single_run import run_from_config


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute permutation feature importance")
    parser.add_argument("config", help="Path to YAML config file")
    parser.add_argument("--output-dir", help="Directory for artifacts")
    args = parser.parse_args()

    artifacts = run_from_config(args.config, output_dir=args.output_dir)
    print(f"Wrote results to {artifacts.results_path}")
    if artifacts.plot_path is not None:
        print(f"Wrote plot to {artifacts.plot_path}")


if __name__ == "__main__":
    main()

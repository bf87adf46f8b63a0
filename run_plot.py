"""
run_plot.py - CLI Entry Point

This script serves as the command-line interface entry point for the
collage plotter. It forwards execution to the CLI logic defined in
`src/collage_plot/cli.py`.

Usage:
    python run_plot.py plot.toml [options]

This wrapper allows you to run the tool directly without needing to
modify PYTHONPATH or install the project as a package.

For help on available options, run:
    python run_plot.py --help
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import collage_plot.cli as cp_cli

if __name__ == "__main__":
    raise SystemExit(cp_cli.main())

#!/usr/bin/env python3
"""
Paper Figure Generator
======================

Generates all published figures:
1. Particle size distribution (particleSize.tiff)
2. Step responses of each test (stepRespContr/Valve/All<n>.tiff,
   Figure8-10.tiff/.eps for the reference test)

Tests are given as pairs of measured CSV and simulated .npz files. With
--synthetic a demonstration test is generated instead, including a placeholder
inset image if none exists.

Usage:
    python -m fluidbed_figures.generate_paper_figures --synthetic
    python -m fluidbed_figures.generate_paper_figures \\
        --test test1.csv test1.npz 2.5 --test test2.csv test2.npz 3.0 --bed_height 0.2
"""

import argparse
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from .config import FIGURE_DIR, INSET_FILENAME
from .datasets import load_measured_run, load_simulation_run, synthetic_step_response
from .dynamic_response import DynamicReportConfig, report_step_response
from .export import ensure_output_dir, list_outputs
from .particle_size import report_particle_size


def render_placeholder_inset(path: Path) -> Path:
    """Simple schematic of the chambers with the probe positions, used for demo runs."""
    fig, ax = plt.subplots(figsize=(1.5, 1.5))
    for i, x in enumerate((0.05, 0.37, 0.69)):
        ax.add_patch(Rectangle((x, 0.1), 0.26, 0.6, fill=False, linewidth=1.5))
        ax.plot([x + 0.13, x + 0.13], [0.1, 0.55], color=f"C{i}", linewidth=2)
        ax.text(x + 0.13, 0.78, f"$h_{6 - i}$", ha="center", fontsize=9)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_axis_off()
    fig.savefig(path, dpi=200, facecolor="white")
    plt.close(fig)
    print(f"  Saved placeholder inset: {path}")
    return path


def main(argv=None):
    p = argparse.ArgumentParser(description="Generate all figures of the paper")
    p.add_argument("--output_dir", default=str(FIGURE_DIR))
    p.add_argument("--test", nargs=3, action="append", default=[],
                   metavar=("MEASURED_CSV", "SIMULATION_NPZ", "FG2"),
                   help="One step-response test; the first one given is test 1")
    p.add_argument("--bed_height", type=float, default=0.0)
    p.add_argument("--synthetic", action="store_true", help="Use a synthetic demonstration test")
    args = p.parse_args(argv)

    print("=" * 70)
    print("PAPER FIGURE GENERATOR")
    print("=" * 70)

    out = ensure_output_dir(args.output_dir)
    report_particle_size(out)

    tests = []
    for idx, (csv_path, npz_path, fg2) in enumerate(args.test, start=1):
        tests.append((idx, load_measured_run(csv_path), load_simulation_run(npz_path), float(fg2)))
    if args.synthetic:
        inset = out / INSET_FILENAME
        if not inset.exists():
            render_placeholder_inset(inset)
        measured, simulated = synthetic_step_response(bed_height=args.bed_height)
        tests.append((len(tests) + 1, measured, simulated, 2.5))
    if not tests:
        print("\nNo step-response tests given (use --test or --synthetic)")

    for idx, measured, simulated, fg2 in tests:
        cfg = DynamicReportConfig(run_index=idx, bed_height=args.bed_height,
                                  output_dir=out, fluidization_number=fg2)
        report_step_response(measured, simulated, cfg)

    print("\n" + "=" * 70)
    print("ALL FIGURES GENERATED SUCCESSFULLY")
    print(f"Output directory: {out}")
    print("=" * 70)

    print("\nGenerated Files:")
    for name in list_outputs(out):
        print(f"  - {name}")


if __name__ == "__main__":
    main()

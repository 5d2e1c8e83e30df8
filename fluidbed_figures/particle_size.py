#!/usr/bin/env python3
"""
Particle Size Distribution
==========================

Mean particle diameter of the bed material from the sieve analysis in the
supplier's data sheet, plus a distribution plot.

Procedure:
1) Mean particle size of each sieve fraction, assuming a linear distribution
   between neighbouring mesh sizes
2) Mean diameter = sum(residual fraction * mean mesh size)
3) Plot residual fraction vs raw mesh size ("Sieve") and vs mean mesh size
   ("Linear"), export to particleSize.tiff

Usage:
    python -m fluidbed_figures.particle_size --output_dir Figures
"""

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from .charts import ChartSpec, Trace, close_chart, export_chart, render_chart
from .config import (
    FIGURE_DIR,
    MESH_SIZES,
    PARTICLE_SIZE_BASENAME,
    PARTICLE_SIZE_TITLE,
    RESIDUES,
)
from .errors import InvalidInput
from .export import ensure_output_dir
from .style import COLORS, apply_publication_style

PAIRINGS = ("finer", "coarser")


@dataclass(frozen=True)
class MeshBin:
    mesh_size: float            # m
    residual_fraction: float    # -


@dataclass(frozen=True)
class SieveAnalysis:
    bins: Tuple[MeshBin, ...]
    mean_mesh_size: np.ndarray
    diameter: float

    @property
    def mesh_size(self) -> np.ndarray:
        return np.array([b.mesh_size for b in self.bins])

    @property
    def residual_fraction(self) -> np.ndarray:
        return np.array([b.residual_fraction for b in self.bins])


# ---------------------- Input ----------------------
def bins_from_table(mesh: Sequence[float], residues: Sequence[float]) -> List[MeshBin]:
    """Build mesh bins from two parallel sequences, validating the table."""
    mesh = np.asarray(mesh, dtype=np.float64)
    residues = np.asarray(residues, dtype=np.float64)
    if mesh.ndim != 1 or residues.ndim != 1:
        raise InvalidInput("Sieve table columns must be one-dimensional")
    if mesh.size == 0:
        raise InvalidInput("Sieve table is empty")
    if mesh.size != residues.size:
        raise InvalidInput(f"Sieve table has {mesh.size} mesh sizes but {residues.size} residues")
    if not (np.all(np.isfinite(mesh)) and np.all(np.isfinite(residues))):
        raise InvalidInput("Sieve table contains non-finite values")
    if np.any(mesh < 0) or np.any(residues < 0):
        raise InvalidInput("Mesh sizes and residues must be non-negative")
    if np.any(np.diff(mesh) >= 0):
        raise InvalidInput("Mesh sizes must be strictly decreasing")
    return [MeshBin(float(m), float(r)) for m, r in zip(mesh, residues)]


def load_sieve_table(path, percent: bool = False, micrometres: bool = False) -> List[MeshBin]:
    """Load a sieve table from CSV with columns mesh_size, residue."""
    df = pd.read_csv(path)
    cols = {c.strip().lower(): c for c in df.columns}
    if "mesh_size" not in cols or "residue" not in cols:
        raise InvalidInput(f"{path}: CSV must have mesh_size and residue columns")
    mesh = df[cols["mesh_size"]].to_numpy(np.float64)
    resid = df[cols["residue"]].to_numpy(np.float64)
    if micrometres:
        mesh = mesh * 1e-6
    if percent:
        resid = resid / 100
    return bins_from_table(mesh, resid)


def default_bins() -> List[MeshBin]:
    return bins_from_table(MESH_SIZES, RESIDUES)


# ---------------------- Analysis ----------------------
def mean_mesh_sizes(mesh: Sequence[float], pairing: str = "finer") -> np.ndarray:
    """
    Representative particle size of each sieve fraction.

    pairing="finer":   (mesh[i] + mesh[i+1]) / 2, the last bin keeps mesh[-1]
    pairing="coarser": (mesh[i-1] + mesh[i]) / 2, the first bin keeps mesh[0]
                       (windowed mean over the current and the previous sieve)
    """
    mesh = np.asarray(mesh, dtype=np.float64)
    if mesh.size == 0:
        raise InvalidInput("Sieve table is empty")
    if pairing not in PAIRINGS:
        raise InvalidInput(f"Unknown pairing '{pairing}', expected one of {PAIRINGS}")

    mean = mesh.copy()
    if pairing == "finer":
        mean[:-1] = (mesh[:-1] + mesh[1:]) / 2
    else:
        mean[1:] = (mesh[:-1] + mesh[1:]) / 2
    return mean


def particle_diameter(bins: Sequence[MeshBin], pairing: str = "finer") -> float:
    if len(bins) == 0:
        raise InvalidInput("Sieve table is empty")
    mesh = np.array([b.mesh_size for b in bins])
    resid = np.array([b.residual_fraction for b in bins])
    return float(np.sum(resid * mean_mesh_sizes(mesh, pairing)))


def analyze(bins: Sequence[MeshBin], pairing: str = "finer") -> SieveAnalysis:
    if len(bins) == 0:
        raise InvalidInput("Sieve table is empty")
    bins = tuple(bins)
    mesh = np.array([b.mesh_size for b in bins])
    return SieveAnalysis(
        bins=bins,
        mean_mesh_size=mean_mesh_sizes(mesh, pairing),
        diameter=particle_diameter(bins, pairing),
    )


# ---------------------- Plot ----------------------
def particle_size_chart(analysis: SieveAnalysis, title: str = PARTICLE_SIZE_TITLE) -> ChartSpec:
    resid = analysis.residual_fraction
    return ChartSpec(
        traces=[
            Trace(analysis.mesh_size, resid, color=COLORS['primary'], label="Sieve"),
            Trace(analysis.mean_mesh_size, resid, color=COLORS['secondary'], label="Linear"),
        ],
        title=title,
        xlabel="Mesh size (m)",
        ylabel="Retained mass fraction (-)",
        xlim=(0.0, float(np.max(analysis.mesh_size))),
    )


def report_particle_size(output_dir=FIGURE_DIR, bins=None, pairing: str = "finer",
                         verbose: bool = True):
    """Compute the mean diameter and export the distribution plot.

    Returns (analysis, written paths).
    """
    if bins is None:
        bins = default_bins()
    analysis = analyze(bins, pairing)

    if verbose:
        print("\n[1/1] Generating: Particle size distribution")
        total = float(np.sum(analysis.residual_fraction))
        if abs(total - 1.0) > 1e-3:
            print(f"  Warning: residual fractions sum to {total:.4f}, not 1")
        print(f"  Mean particle diameter d_p = {analysis.diameter * 1e6:.3f} um")

    out = ensure_output_dir(output_dir)
    apply_publication_style()
    ctx = render_chart(particle_size_chart(analysis))
    try:
        written = export_chart(ctx, out, PARTICLE_SIZE_BASENAME, verbose=verbose)
    finally:
        close_chart(ctx)
    return analysis, written


def main(argv=None):
    p = argparse.ArgumentParser(description="Mean particle diameter and size distribution plot")
    p.add_argument("--output_dir", default=str(FIGURE_DIR), help="Directory for exported figures")
    p.add_argument("--table", default="", help="Optional CSV with columns mesh_size,residue")
    p.add_argument("--percent", action="store_true", help="Residues in the CSV are given in percent")
    p.add_argument("--micrometres", action="store_true", help="Mesh sizes in the CSV are given in um")
    p.add_argument("--pairing", default="finer", choices=PAIRINGS,
                   help="Neighbouring sieve used for the mean size of each fraction")
    args = p.parse_args(argv)

    bins = load_sieve_table(args.table, args.percent, args.micrometres) if args.table else None
    analysis, _ = report_particle_size(Path(args.output_dir), bins=bins, pairing=args.pairing)
    return analysis


if __name__ == "__main__":
    main()

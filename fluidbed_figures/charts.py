"""
Chart rendering
===============

A chart is described by a ``ChartSpec`` (what to draw and how to label it) and
rendered into a ``ChartContext`` that owns its own figure and axes. Nothing is
drawn through pyplot's implicit "current figure", so several charts can be
built, re-titled and exported independently.

Legend entries are given explicitly as ``LegendEntry`` records. They are turned
into legend handles without being drawn on the axes, which decouples what is
plotted from what is labelled.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.lines import Line2D
from matplotlib.ticker import FuncFormatter

from .config import FIGURE_SIZE, FIGURE_SIZE_CM, STANDARD_FORMATS
from .errors import MissingAsset
from .export import save_figure


@dataclass(frozen=True)
class Trace:
    x: np.ndarray
    y: np.ndarray
    color: Optional[str] = None
    linestyle: str = "-"
    label: Optional[str] = None


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str
    linestyle: str = "-"


@dataclass(frozen=True)
class InsetImage:
    """Pre-rendered image placed at a fixed figure position (cm from lower left)."""
    path: Path
    position_cm: Tuple[float, float, float, float]


@dataclass
class ChartSpec:
    traces: List[Trace]
    xlabel: str = ""
    ylabel: str = ""
    title: Optional[str] = None
    xlim: Optional[Tuple[float, float]] = None
    ylim: Optional[Tuple[float, float]] = None
    vlines: Sequence[float] = ()
    legend: Optional[List[LegendEntry]] = None
    legend_loc: str = "best"
    legend_outside: bool = False
    time_axis: bool = False
    inset: Optional[InsetImage] = None
    figsize: Tuple[float, float] = FIGURE_SIZE


@dataclass
class ChartContext:
    fig: plt.Figure
    ax: plt.Axes
    title: Optional[matplotlib.text.Text] = None
    inset_ax: Optional[plt.Axes] = None


def format_hms(seconds, _pos=None) -> str:
    """Tick formatter: seconds -> HH:MM:SS."""
    total = int(round(seconds))
    sign = "-" if total < 0 else ""
    total = abs(total)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{sign}{h:02d}:{m:02d}:{s:02d}"


def legend_handles(entries: Sequence[LegendEntry]) -> List[Line2D]:
    """Legend handles for explicit entries; these are never added to the axes."""
    return [Line2D([], [], color=e.color, linestyle=e.linestyle, label=e.label) for e in entries]


def _add_inset(fig, inset: InsetImage) -> plt.Axes:
    width_cm, height_cm = FIGURE_SIZE_CM
    left, bottom, w, h = inset.position_cm
    ax2 = fig.add_axes([left / width_cm, bottom / height_cm, w / width_cm, h / height_cm])
    ax2.imshow(plt.imread(inset.path), interpolation="bilinear")
    ax2.set_axis_off()
    return ax2


def render_chart(spec: ChartSpec) -> ChartContext:
    """Draw a ChartSpec into a new figure and return its context."""
    # Check the inset first so a missing asset does not leave an open figure
    if spec.inset is not None and not os.path.isfile(spec.inset.path):
        raise MissingAsset(f"Inset image not found: {spec.inset.path}")

    fig, ax = plt.subplots(figsize=spec.figsize)
    try:
        for tr in spec.traces:
            ax.plot(tr.x, tr.y, color=tr.color, linestyle=tr.linestyle, label=tr.label)

        for xv in spec.vlines:
            ax.axvline(xv, color="k", linewidth=0.8)

        if spec.legend is not None:
            handles = legend_handles(spec.legend)
        else:
            handles = [ln for ln in ax.get_lines() if ln.get_label() and not ln.get_label().startswith("_")]
        if handles:
            if spec.legend_outside:
                ax.legend(handles=handles, loc="center left", bbox_to_anchor=(1.02, 0.5), frameon=True)
            else:
                ax.legend(handles=handles, loc=spec.legend_loc)

        ax.set_xlabel(spec.xlabel)
        ax.set_ylabel(spec.ylabel)
        title = ax.set_title(spec.title) if spec.title else None

        if spec.time_axis:
            ax.xaxis.set_major_formatter(FuncFormatter(format_hms))
        if spec.xlim is not None:
            ax.set_xlim(*spec.xlim)
        if spec.ylim is not None:
            ax.set_ylim(*spec.ylim)

        inset_ax = _add_inset(fig, spec.inset) if spec.inset is not None else None
    except Exception:
        plt.close(fig)
        raise
    return ChartContext(fig=fig, ax=ax, title=title, inset_ax=inset_ax)


def strip_title(ctx: ChartContext) -> ChartContext:
    """Remove the title, e.g. for figures whose caption carries it."""
    if ctx.title is not None:
        ctx.ax.set_title("")
        ctx.title = None
    return ctx


def export_chart(ctx: ChartContext, output_dir, basename: str,
                 formats=STANDARD_FORMATS, verbose: bool = True) -> List[Path]:
    return save_figure(ctx.fig, output_dir, basename, formats=formats, verbose=verbose)


def close_chart(ctx: ChartContext) -> None:
    plt.close(ctx.fig)

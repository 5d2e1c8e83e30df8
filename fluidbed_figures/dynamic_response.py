#!/usr/bin/env python3
"""
Post Processing of Dynamic Simulations
======================================

Compares a simulated step response of the bed level controller with the
measurement of the same test and exports three figures per test:

1. stepRespContr<n>: controlled bed level h_4 (measured, simulated, setpoint)
2. stepRespValve<n>: valve actuating value (measured, simulated)
3. stepRespAll<n>:   bed levels at all probe positions, with the pre-rendered
                     StepResponseFigureInsert image of the test rig

For the reference test the figures are additionally exported without title as
Figure8-10 in tiff and eps.

Simulated and measured series are overlaid on the same time axis without
resampling; the visible window is the measured run.

Usage:
    python -m fluidbed_figures.dynamic_response --measured test1.csv \\
        --simulation test1.npz --run 1 --bed_height 0.2 --fg2 2.5
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .charts import (
    ChartSpec,
    InsetImage,
    LegendEntry,
    Trace,
    close_chart,
    export_chart,
    render_chart,
    strip_title,
)
from .config import (
    BAFFLE_INDEX,
    DEFAULT_PROBES,
    FIGURE_DIR,
    INSET_FILENAME,
    INSET_POSITION_CM,
    MEASURED_ACTUATOR_COLUMN,
    MEASURED_CONTROL_COLUMN,
    MEASURED_SETPOINT_COLUMN,
    PAPER_FIGURE_NUMBERS,
    PAPER_FORMATS,
    REFERENCE_RUN,
    STANDARD_FORMATS,
    STEP_TIME,
)
from .datasets import MeasuredRun, SimulatedRun, load_measured_run, load_simulation_run
from .errors import InvalidInput
from .export import ensure_output_dir
from .style import COLORS, apply_publication_style, probe_colors


@dataclass(frozen=True)
class ProbePosition:
    label: str              # legend label, e.g. h_6
    measured_column: str    # channel in the measured run
    grid_index: int         # cell of the simulation grid


@dataclass
class DynamicReportConfig:
    run_index: int = 1
    bed_height: float = 0.0
    output_dir: Path = FIGURE_DIR
    control_probe: int = BAFFLE_INDEX
    probes: List[ProbePosition] = field(
        default_factory=lambda: [ProbePosition(*p) for p in DEFAULT_PROBES])
    fluidization_number: Optional[float] = None
    reference_run: int = REFERENCE_RUN
    step_time: float = STEP_TIME
    inset_path: Optional[Path] = None
    formats: Sequence[str] = STANDARD_FORMATS
    paper_formats: Sequence[str] = PAPER_FORMATS
    verbose: bool = True

    def __post_init__(self):
        self.output_dir = Path(self.output_dir)
        if self.inset_path is None:
            self.inset_path = self.output_dir / INSET_FILENAME

    @property
    def is_reference(self) -> bool:
        return self.run_index == self.reference_run

    @property
    def title(self) -> str:
        text = f"Step Response, Test {self.run_index}"
        if self.fluidization_number is not None:
            ratio = round(self.fluidization_number - 1, 1)
            text += f", $w_{{e}}$/$w_{{mf}}$={ratio:g}"
        return text


def time_range(measured: MeasuredRun):
    """Visible window of every chart: start of the run to the end of the measurement."""
    return (0.0, measured.duration)


def validate_channels(measured: MeasuredRun, simulated: SimulatedRun, cfg: DynamicReportConfig):
    """Fail before anything is written if a requested series does not exist."""
    if not cfg.probes:
        raise InvalidInput("At least one probe position is required")
    measured.require([MEASURED_CONTROL_COLUMN, MEASURED_ACTUATOR_COLUMN, MEASURED_SETPOINT_COLUMN])
    measured.require(p.measured_column for p in cfg.probes)
    simulated.level_at(cfg.control_probe)
    for p in cfg.probes:
        simulated.level_at(p.grid_index)


# ---------------------- Charts ----------------------
def controlled_level_chart(measured: MeasuredRun, simulated: SimulatedRun,
                           cfg: DynamicReportConfig) -> ChartSpec:
    return ChartSpec(
        traces=[
            Trace(measured.time, measured.channel(MEASURED_CONTROL_COLUMN) + cfg.bed_height,
                  color=COLORS['primary'], label="Measured"),
            Trace(simulated.time, simulated.level_at(cfg.control_probe),
                  color=COLORS['secondary'], label="Simulated"),
            Trace(measured.time, measured.channel(MEASURED_SETPOINT_COLUMN),
                  color=COLORS['secondary'], linestyle="--", label="Setpoint"),
        ],
        title=cfg.title,
        xlabel="Time (HH:MM:SS)",
        ylabel="Bed Level $h_4$ (m)",
        xlim=time_range(measured),
        time_axis=True,
    )


def actuator_chart(measured: MeasuredRun, simulated: SimulatedRun,
                   cfg: DynamicReportConfig) -> ChartSpec:
    return ChartSpec(
        traces=[
            Trace(measured.time, measured.channel(MEASURED_ACTUATOR_COLUMN),
                  color=COLORS['primary'], label="Measured"),
            Trace(simulated.time, simulated.actuator,
                  color=COLORS['secondary'], label="Simulated"),
        ],
        vlines=[cfg.step_time],
        title=cfg.title,
        xlabel="Time (HH:MM:SS)",
        ylabel="Valve Actuating Value (-)",
        xlim=time_range(measured),
        time_axis=True,
    )


def probe_level_range(measured: MeasuredRun, probes: Sequence[ProbePosition], bed_height: float):
    """y range of the multi-probe chart: 15 % below / 5 % above the measured levels."""
    hmeas = np.column_stack([measured.channel(p.measured_column) for p in probes])
    return (float(np.nanmin(hmeas)) * 0.85 + bed_height,
            float(np.nanmax(hmeas)) * 1.05 + bed_height)


def multi_probe_chart(measured: MeasuredRun, simulated: SimulatedRun,
                      cfg: DynamicReportConfig) -> ChartSpec:
    colors = probe_colors(len(cfg.probes))
    traces = []
    for p, color in zip(cfg.probes, colors):
        traces.append(Trace(measured.time, measured.channel(p.measured_column) + cfg.bed_height,
                            color=color, linestyle="-"))
        traces.append(Trace(simulated.time, simulated.level_at(p.grid_index),
                            color=color, linestyle="--"))

    legend = [LegendEntry(f"${p.label}$", color) for p, color in zip(cfg.probes, colors)]
    legend += [
        LegendEntry("Measured", COLORS['neutral'], "-"),
        LegendEntry("Simulated", COLORS['neutral'], "--"),
    ]

    return ChartSpec(
        traces=traces,
        vlines=[cfg.step_time],
        legend=legend,
        legend_outside=True,
        title=cfg.title,
        xlabel="Time (HH:MM:SS)",
        ylabel="Bed Level (m)",
        xlim=time_range(measured),
        ylim=probe_level_range(measured, cfg.probes, cfg.bed_height),
        time_axis=True,
        inset=InsetImage(Path(cfg.inset_path), INSET_POSITION_CM),
    )


CHARTS = (
    ("stepRespContr", "Controlled bed level", controlled_level_chart),
    ("stepRespValve", "Valve actuating value", actuator_chart),
    ("stepRespAll", "Bed levels at all probes", multi_probe_chart),
)


# ---------------------- Report ----------------------
def report_step_response(measured: MeasuredRun, simulated: SimulatedRun,
                         cfg: DynamicReportConfig) -> List[Path]:
    """Render and export all figures of one test. Returns the written paths.

    Files written before a failing chart are kept.
    """
    validate_channels(measured, simulated, cfg)
    out = ensure_output_dir(cfg.output_dir)
    apply_publication_style()

    written = []
    for i, (kind, description, build) in enumerate(CHARTS, start=1):
        if cfg.verbose:
            print(f"\n[{i}/{len(CHARTS)}] Generating: {description}, test {cfg.run_index}")
        ctx = render_chart(build(measured, simulated, cfg))
        try:
            written += export_chart(ctx, out, f"{kind}{cfg.run_index}",
                                    formats=cfg.formats, verbose=cfg.verbose)
            if cfg.is_reference:
                strip_title(ctx)
                written += export_chart(ctx, out, f"Figure{PAPER_FIGURE_NUMBERS[kind]}",
                                        formats=cfg.paper_formats, verbose=cfg.verbose)
        finally:
            close_chart(ctx)
    return written


def parse_probe(text: str) -> ProbePosition:
    """LABEL:COLUMN:INDEX, e.g. h_6:h6:20"""
    try:
        label, column, index = text.split(":")
        return ProbePosition(label, column, int(index))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Probe must be LABEL:COLUMN:INDEX, got '{text}'")


def main(argv=None):
    p = argparse.ArgumentParser(description="Step response figures: simulation vs measurement")
    p.add_argument("--measured", required=True, help="CSV with Time and measured channels (h4, h5, h6, AC1, AC1set)")
    p.add_argument("--simulation", required=True, help=".npz with arrays time, bed_level, actuator")
    p.add_argument("--run", type=int, default=1, help="Test index used in titles and filenames")
    p.add_argument("--bed_height", type=float, default=0.0, help="Offset added to measured bed levels (m)")
    p.add_argument("--fg2", type=float, default=None, help="Fluidization number FG2 shown in the title")
    p.add_argument("--control_probe", type=int, default=BAFFLE_INDEX, help="Grid index of the controlled level")
    p.add_argument("--probe", type=parse_probe, action="append", default=None,
                   help="Probe position LABEL:COLUMN:INDEX (repeatable)")
    p.add_argument("--output_dir", default=str(FIGURE_DIR))
    p.add_argument("--inset", default="", help=f"Inset image (default: <output_dir>/{INSET_FILENAME})")
    p.add_argument("--reference_run", type=int, default=REFERENCE_RUN)
    args = p.parse_args(argv)

    cfg = DynamicReportConfig(
        run_index=args.run,
        bed_height=args.bed_height,
        output_dir=Path(args.output_dir),
        control_probe=args.control_probe,
        fluidization_number=args.fg2,
        reference_run=args.reference_run,
        inset_path=Path(args.inset) if args.inset else None,
    )
    if args.probe:
        cfg.probes = args.probe

    measured = load_measured_run(args.measured)
    simulated = load_simulation_run(args.simulation)
    return report_step_response(measured, simulated, cfg)


if __name__ == "__main__":
    main()

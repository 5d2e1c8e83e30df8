"""
Step-response datasets
======================

MeasuredRun   - time series recorded at the test rig (seconds since run start,
                named channels such as h4, h5, h6, AC1, AC1set)
SimulatedRun  - output of the dynamic model: bed level on the simulation grid
                and the controller's actuating value, on its own time base

The two are never resampled onto each other; the charts overlay them on a
shared time axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .config import BAFFLE_INDEX, DEFAULT_PROBES, STEP_TIME
from .errors import InvalidInput, MissingChannel


def _to_seconds(values) -> np.ndarray:
    """Time column -> float seconds. Accepts numbers, timedeltas or 'HH:MM:SS' strings."""
    s = pd.Series(values)
    if pd.api.types.is_timedelta64_dtype(s):
        return s.dt.total_seconds().to_numpy(np.float64)
    if pd.api.types.is_numeric_dtype(s):
        return s.to_numpy(np.float64)
    try:
        return pd.to_timedelta(s.astype(str)).dt.total_seconds().to_numpy(np.float64)
    except ValueError as e:
        raise InvalidInput(f"Cannot interpret time column: {e}") from e


@dataclass
class MeasuredRun:
    frame: pd.DataFrame     # index: time in s

    @classmethod
    def from_frame(cls, df: pd.DataFrame, time_column: Optional[str] = "Time") -> "MeasuredRun":
        if time_column is not None and time_column in df.columns:
            t = _to_seconds(df[time_column])
            data = df.drop(columns=[time_column])
        else:
            t = _to_seconds(df.index)
            data = df
        if len(t) == 0:
            raise InvalidInput("Measured run is empty")
        if not np.all(np.isfinite(t)):
            raise InvalidInput("Measured run has non-finite time stamps")
        if np.max(t) <= 0:
            raise InvalidInput("Measured run has zero duration")
        frame = data.copy()
        frame.index = pd.Index(t, name="time_s")
        return cls(frame=frame.sort_index())

    @property
    def time(self) -> np.ndarray:
        return self.frame.index.to_numpy(np.float64)

    @property
    def duration(self) -> float:
        return float(np.max(self.time))

    def channel(self, name: str) -> np.ndarray:
        if name not in self.frame.columns:
            raise MissingChannel(f"Measured run has no channel '{name}' (available: {list(self.frame.columns)})")
        return self.frame[name].to_numpy(np.float64)

    def require(self, names: Iterable[str]) -> None:
        for name in names:
            self.channel(name)


@dataclass
class SimulatedRun:
    time: np.ndarray        # (n,) s
    bed_level: np.ndarray   # (n, n_cells) m
    actuator: np.ndarray    # (n,) -

    def __post_init__(self):
        self.time = np.asarray(self.time, dtype=np.float64).ravel()
        self.bed_level = np.asarray(self.bed_level, dtype=np.float64)
        self.actuator = np.asarray(self.actuator, dtype=np.float64).ravel()
        if self.time.size == 0:
            raise InvalidInput("Simulated run is empty")
        if not np.all(np.isfinite(self.time)):
            raise InvalidInput("Simulated run has non-finite time stamps")
        if self.bed_level.ndim == 1:
            self.bed_level = self.bed_level[:, None]
        if self.bed_level.ndim != 2 or self.bed_level.shape[0] != self.time.size:
            raise InvalidInput(
                f"bed_level must have shape (n_times, n_cells) with n_times={self.time.size}, "
                f"got {self.bed_level.shape}")
        if self.actuator.size != self.time.size:
            raise InvalidInput(f"actuator has {self.actuator.size} samples, expected {self.time.size}")

    @property
    def n_cells(self) -> int:
        return self.bed_level.shape[1]

    def level_at(self, index: int) -> np.ndarray:
        """Simulated bed level at one grid cell."""
        if not 0 <= index < self.n_cells:
            raise MissingChannel(f"Simulated run has no grid cell {index} (n_cells={self.n_cells})")
        return self.bed_level[:, index]


# ---------------------- IO helpers ----------------------
def load_measured_run(path: str, time_column: str = "Time") -> MeasuredRun:
    """Load measured channels from CSV; time in seconds or HH:MM:SS."""
    df = pd.read_csv(path)
    if time_column not in df.columns:
        raise MissingChannel(f"{path}: no time column '{time_column}'")
    return MeasuredRun.from_frame(df, time_column=time_column)


def load_simulation_run(path: str) -> SimulatedRun:
    """Load a simulated run from .npz with keys time, bed_level, actuator."""
    with np.load(path) as data:
        for key in ("time", "bed_level", "actuator"):
            if key not in data:
                raise MissingChannel(f"{path}: no array '{key}'")
        return SimulatedRun(time=data["time"], bed_level=data["bed_level"], actuator=data["actuator"])


# ---------------------- Synthetic data ----------------------
def synthetic_step_response(duration: float = 600.0,
                            step_time: float = STEP_TIME,
                            bed_height: float = 0.2,
                            n_cells: int = 80,
                            setpoint: tuple = (0.30, 0.33),
                            sim_dt: float = 5.0,
                            noise: float = 0.002,
                            seed: int = 42):
    """First-order step response pair for demonstrations when real data is not available.

    Measured levels are stored relative to bed_height (as recorded by the rig),
    simulated levels are absolute. Returns (MeasuredRun, SimulatedRun).
    """
    rng = np.random.default_rng(seed)
    sp0, sp1 = setpoint
    probe_cells = {col: idx for _, col, idx in DEFAULT_PROBES}
    n_cells = max(n_cells, max(probe_cells.values()) + 1, BAFFLE_INDEX + 1)

    def response(t, tau, gain):
        dt = np.clip(t - step_time, 0.0, None)
        return gain * (1.0 - np.exp(-dt / tau))

    # Measured: 1 s sampling
    t_meas = np.arange(0.0, duration + 1.0, 1.0)
    step = np.where(t_meas >= step_time, sp1, sp0)
    meas = {"Time": t_meas, "AC1set": step}
    # Levels along the chamber: further upstream responds slower and weaker
    for k, (col, idx) in enumerate(sorted(probe_cells.items(), key=lambda kv: kv[1])):
        lag = 1.0 + 0.5 * (len(probe_cells) - 1 - k)
        level = sp0 - 0.01 * (len(probe_cells) - 1 - k) + response(t_meas, 40.0 * lag, (sp1 - sp0) / lag)
        meas[col] = level - bed_height + rng.normal(0.0, noise, t_meas.size)
    meas["AC1"] = np.clip(0.5 + 2.0 * response(t_meas, 8.0, sp1 - sp0) * np.exp(-np.clip(t_meas - step_time, 0, None) / 120.0)
                          + rng.normal(0.0, noise, t_meas.size), 0.0, 1.0)
    measured = MeasuredRun.from_frame(pd.DataFrame(meas), time_column="Time")

    # Simulated: coarser grid, slightly shorter run
    t_sim = np.arange(0.0, duration - sim_dt + 1e-9, sim_dt)
    cells = np.arange(n_cells)
    lag = 1.0 + (BAFFLE_INDEX - np.clip(cells, 0, BAFFLE_INDEX)) / max(BAFFLE_INDEX, 1)
    base = sp0 - 0.01 * (BAFFLE_INDEX - np.clip(cells, 0, BAFFLE_INDEX)) / max(BAFFLE_INDEX, 1) * 2
    levels = base[None, :] + response(t_sim[:, None], 38.0 * lag[None, :], (sp1 - sp0) / lag[None, :])
    actuator = np.clip(0.5 + 2.0 * response(t_sim, 7.0, sp1 - sp0) * np.exp(-np.clip(t_sim - step_time, 0, None) / 120.0),
                       0.0, 1.0)
    simulated = SimulatedRun(time=t_sim, bed_level=levels, actuator=actuator)
    return measured, simulated

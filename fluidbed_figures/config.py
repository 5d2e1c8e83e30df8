"""
Configuration
=============

Central constants for the figure scripts: sieve table of the bed material,
figure geometry, export settings and the layout of the step-response tests.
Every constant can be overridden from the command line or through the
dataclass configs in the report modules.
"""

from pathlib import Path

import numpy as np

# ============================================
# OUTPUT
# ============================================
FIGURE_DIR = Path("Figures")

# Figure size of the published plots: 17 x 8.5 cm
CM = 1 / 2.54
FIGURE_SIZE_CM = (17.0, 8.5)
FIGURE_SIZE = (FIGURE_SIZE_CM[0] * CM, FIGURE_SIZE_CM[1] * CM)

SAVE_DPI = 300
STANDARD_FORMATS = ("tiff",)
PAPER_FORMATS = ("tiff", "eps")  # raster + vector

# ============================================
# PARTICLE SIZE (GRANUSIL, Wedron IL #801, Grade 7020)
# ============================================
MESH_SIZES = np.array([425, 300, 212, 150, 106, 75, 53, 0]) * 1e-6   # m
RESIDUES = np.array([0, 2.2, 14.7, 47.5, 28.8, 6.4, 0.4, 0]) / 100   # -

PARTICLE_SIZE_TITLE = "Particle size distribution, GRANUSIL, Wedron IL #801, Grade 7020"
PARTICLE_SIZE_BASENAME = "particleSize"

# ============================================
# STEP RESPONSE TESTS
# ============================================
BAFFLE_INDEX = 62          # grid cell of the controlled bed level h_4 (zero-based)
STEP_TIME = 20.0           # s after run start
REFERENCE_RUN = 1          # run exported separately for the paper
PAPER_FIGURE_NUMBERS = {
    "stepRespContr": 8,
    "stepRespValve": 9,
    "stepRespAll": 10,
}
INSET_FILENAME = "StepResponseFigureInsert.tiff"
INSET_POSITION_CM = (12.5, 1.25, 3.6, 3.59)   # left, bottom, width, height

# Measured channels of the test rig
MEASURED_CONTROL_COLUMN = "h4"
MEASURED_ACTUATOR_COLUMN = "AC1"
MEASURED_SETPOINT_COLUMN = "AC1set"
DEFAULT_PROBES = (
    # label, measured column, simulated grid index
    ("h_6", "h6", 20),
    ("h_5", "h5", 41),
    ("h_4", "h4", BAFFLE_INDEX),
)

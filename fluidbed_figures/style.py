"""Publication style shared by all figures."""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.colors import to_hex

# Color palette (publication-friendly)
COLORS = {
    'primary': '#1f77b4',      # Blue
    'secondary': '#ff7f0e',    # Orange
    'tertiary': '#2ca02c',     # Green
    'warning': '#d62728',      # Red
    'neutral': 'k',
}


def apply_publication_style():
    """Set the seaborn/matplotlib style used for every exported figure."""
    sns.set_style("ticks")
    plt.rcParams.update({
        'font.size': 9,
        'font.family': 'serif',
        'mathtext.fontset': 'cm',
        'axes.labelsize': 9,
        'axes.titlesize': 10,
        'xtick.labelsize': 8,
        'ytick.labelsize': 8,
        'legend.fontsize': 8,
        'axes.linewidth': 0.8,
        'lines.linewidth': 1.2,
        'xtick.direction': 'in',
        'ytick.direction': 'in',
        'xtick.top': True,
        'ytick.right': True,
    })


def probe_colors(n):
    """One color per probe position, consistent across measured and simulated traces."""
    return [to_hex(c) for c in sns.color_palette("tab10", n)]

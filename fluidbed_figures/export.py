"""
Export helpers: output directory handling and multi-format figure saving.
"""

import os
from pathlib import Path
from typing import Iterable, List

from .config import SAVE_DPI, STANDARD_FORMATS
from .errors import IOFailure


def ensure_output_dir(path) -> Path:
    """Create the output directory if it does not exist (idempotent)."""
    out = Path(path)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IOFailure(f"Cannot create output directory {out}: {e}") from e
    return out


def save_figure(fig, output_dir, basename: str,
                formats: Iterable[str] = STANDARD_FORMATS,
                dpi: int = SAVE_DPI, verbose: bool = True) -> List[Path]:
    """Save figure to all desired formats, return the written paths."""
    written = []
    for ext in formats:
        out = Path(output_dir) / f"{basename}.{ext}"
        try:
            fig.savefig(out, dpi=dpi, format=ext, bbox_inches='tight')
        except OSError as e:
            raise IOFailure(f"Cannot write {out}: {e}") from e
        written.append(out)
        if verbose:
            print(f"  Saved: {out}")
    return written


def list_outputs(output_dir, extensions=("tiff", "eps")) -> List[str]:
    """Names of the exported figures in output_dir, sorted per extension."""
    names = []
    for ext in extensions:
        names.extend(sorted(f for f in os.listdir(output_dir) if f.endswith(f".{ext}")))
    return names

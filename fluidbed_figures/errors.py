"""Exceptions raised by the report procedures."""


class FigureError(Exception):
    """Base class for all report-generation failures."""


class InvalidInput(FigureError, ValueError):
    """Malformed or empty input table."""


class MissingChannel(FigureError, KeyError):
    """A requested series or probe position is absent from a dataset."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class IOFailure(FigureError, OSError):
    """Output directory could not be created or an export could not be written."""


class MissingAsset(FigureError, FileNotFoundError):
    """A pre-rendered image required by a chart does not exist."""

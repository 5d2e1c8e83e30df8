import matplotlib.pyplot as plt
import numpy as np
import pytest

from fluidbed_figures.charts import (
    ChartSpec,
    InsetImage,
    LegendEntry,
    Trace,
    export_chart,
    format_hms,
    render_chart,
    strip_title,
)
from fluidbed_figures.errors import IOFailure, MissingAsset
from fluidbed_figures.export import ensure_output_dir, list_outputs, save_figure


def simple_spec(**kwargs):
    x = np.linspace(0.0, 10.0, 11)
    return ChartSpec(traces=[Trace(x, x ** 2, label="square")], title="Test", **kwargs)


def test_ensure_output_dir_is_idempotent(tmp_path):
    target = tmp_path / "Figures"
    ensure_output_dir(target)
    ensure_output_dir(target)
    assert target.is_dir()
    assert [p.name for p in tmp_path.iterdir()] == ["Figures"]


def test_ensure_output_dir_over_file_raises_io_failure(tmp_path):
    blocker = tmp_path / "Figures"
    blocker.write_text("not a directory")
    with pytest.raises(IOFailure):
        ensure_output_dir(blocker)


def test_save_figure_into_missing_dir_raises_io_failure(tmp_path):
    ctx = render_chart(simple_spec())
    with pytest.raises(IOFailure):
        save_figure(ctx.fig, tmp_path / "missing", "chart", verbose=False)


def test_export_formats(tmp_path):
    ctx = render_chart(simple_spec())
    written = export_chart(ctx, tmp_path, "chart", formats=("tiff", "eps"), verbose=False)
    assert [p.name for p in written] == ["chart.tiff", "chart.eps"]
    assert list_outputs(tmp_path) == ["chart.tiff", "chart.eps"]


def test_save_figure_reports_saved_paths(tmp_path, capsys):
    ctx = render_chart(simple_spec())
    save_figure(ctx.fig, tmp_path, "chart")
    assert f"Saved: {tmp_path / 'chart.tiff'}" in capsys.readouterr().out


def test_strip_title(tmp_path):
    ctx = render_chart(simple_spec())
    assert ctx.ax.get_title() == "Test"
    strip_title(ctx)
    assert ctx.ax.get_title() == ""
    assert ctx.title is None


def test_charts_have_independent_figures():
    a = render_chart(simple_spec())
    b = render_chart(simple_spec())
    assert a.fig is not b.fig
    strip_title(a)
    assert b.ax.get_title() == "Test"


def test_explicit_legend_entries():
    spec = simple_spec(legend=[LegendEntry("one", "r"), LegendEntry("two", "k", "--")])
    ctx = render_chart(spec)
    assert [t.get_text() for t in ctx.ax.get_legend().get_texts()] == ["one", "two"]
    assert len(ctx.ax.get_lines()) == 1


def test_missing_inset_raises(tmp_path):
    spec = simple_spec(inset=InsetImage(tmp_path / "nope.tiff", (12.5, 1.25, 3.6, 3.59)))
    with pytest.raises(MissingAsset):
        render_chart(spec)


def test_inset_position_in_figure_fraction(inset_image):
    spec = simple_spec(inset=InsetImage(inset_image, (12.5, 1.25, 3.6, 3.59)))
    ctx = render_chart(spec)
    bounds = ctx.inset_ax.get_position().bounds
    # imshow keeps the aspect ratio, so only the anchor box is fixed
    assert bounds[0] >= 12.5 / 17 - 1e-6
    assert bounds[1] >= 1.25 / 8.5 - 1e-6


@pytest.mark.parametrize("seconds, text", [
    (0, "00:00:00"),
    (20, "00:00:20"),
    (3725, "01:02:05"),
    (-5, "-00:00:05"),
])
def test_format_hms(seconds, text):
    assert format_hms(seconds) == text


def test_failed_render_closes_its_figure():
    before = set(plt.get_fignums())
    with pytest.raises(ValueError):
        render_chart(simple_spec(xlim=(0.0, np.nan)))
    assert set(plt.get_fignums()) == before

import numpy as np
import pytest

from fluidbed_figures.config import MESH_SIZES, RESIDUES
from fluidbed_figures.errors import InvalidInput
from fluidbed_figures.particle_size import (
    analyze,
    bins_from_table,
    default_bins,
    load_sieve_table,
    main,
    mean_mesh_sizes,
    particle_diameter,
    particle_size_chart,
    report_particle_size,
)

# Weighted sum over the published sieve table, finer-neighbour pairing
D_P = 123.305e-6
# Same table, coarser-neighbour pairing
D_P_COARSER = 174.494e-6


def test_fixture_residues_sum_to_one():
    assert np.sum(RESIDUES) == pytest.approx(1.0, abs=1e-9)


def test_diameter_of_published_table():
    assert particle_diameter(default_bins()) == pytest.approx(D_P, abs=1e-12)


def test_diameter_coarser_pairing():
    assert particle_diameter(default_bins(), pairing="coarser") == pytest.approx(D_P_COARSER, abs=1e-12)


def test_mean_mesh_sizes_shape_and_last_element():
    mean = mean_mesh_sizes(MESH_SIZES)
    assert mean.shape == MESH_SIZES.shape
    assert mean[-1] == MESH_SIZES[-1]
    assert mean[0] == pytest.approx((425e-6 + 300e-6) / 2)


def test_mean_mesh_sizes_coarser_keeps_first():
    mean = mean_mesh_sizes(MESH_SIZES, pairing="coarser")
    assert mean[0] == MESH_SIZES[0]
    assert mean[-1] == pytest.approx(26.5e-6)


def test_single_bin_table():
    bins = bins_from_table([1e-4], [1.0])
    assert particle_diameter(bins) == pytest.approx(1e-4)


def test_diameter_matches_hand_computed_sum():
    mesh = [4e-4, 2e-4, 0.0]
    resid = [0.25, 0.5, 0.25]
    expected = 0.25 * 3e-4 + 0.5 * 1e-4 + 0.25 * 0.0
    assert particle_diameter(bins_from_table(mesh, resid)) == pytest.approx(expected)


@pytest.mark.parametrize("mesh, resid", [
    ([], []),
    ([1e-4, 0.0], [1.0]),
    ([0.0, 1e-4], [0.5, 0.5]),
    ([1e-4, 1e-4], [0.5, 0.5]),
    ([1e-4, np.nan], [0.5, 0.5]),
    ([1e-4, 0.0], [-0.5, 1.5]),
])
def test_malformed_tables_rejected(mesh, resid):
    with pytest.raises(InvalidInput):
        bins_from_table(mesh, resid)


def test_empty_input_raises_instead_of_zero():
    with pytest.raises(InvalidInput):
        particle_diameter([])
    with pytest.raises(InvalidInput):
        analyze([])
    with pytest.raises(InvalidInput):
        mean_mesh_sizes([])


def test_unknown_pairing_rejected():
    with pytest.raises(InvalidInput):
        mean_mesh_sizes(MESH_SIZES, pairing="median")


def test_chart_curves_and_x_range():
    spec = particle_size_chart(analyze(default_bins()))
    assert [t.label for t in spec.traces] == ["Sieve", "Linear"]
    assert spec.xlim == (0.0, 425e-6)
    np.testing.assert_array_equal(spec.traces[0].x, MESH_SIZES)


def test_report_writes_particle_size_tiff(tmp_path):
    out = tmp_path / "Figures"
    analysis, written = report_particle_size(out, verbose=False)
    assert analysis.diameter == pytest.approx(D_P, abs=1e-12)
    assert written == [out / "particleSize.tiff"]
    assert (out / "particleSize.tiff").stat().st_size > 0


def test_report_prints_warning_for_unnormalised_fractions(tmp_path, capsys):
    bins = bins_from_table([2e-4, 1e-4, 0.0], [0.2, 0.2, 0.1])
    report_particle_size(tmp_path, bins=bins)
    assert "Warning" in capsys.readouterr().out


def test_load_sieve_table_in_percent_and_micrometres(tmp_path):
    csv = tmp_path / "sieve.csv"
    csv.write_text("mesh_size,residue\n" + "\n".join(
        f"{m * 1e6:g},{r * 100:g}" for m, r in zip(MESH_SIZES, RESIDUES)))
    bins = load_sieve_table(csv, percent=True, micrometres=True)
    assert particle_diameter(bins) == pytest.approx(D_P, abs=1e-12)


def test_load_sieve_table_missing_column(tmp_path):
    csv = tmp_path / "bad.csv"
    csv.write_text("size,fraction\n1,1\n")
    with pytest.raises(InvalidInput):
        load_sieve_table(csv)


def test_cli(tmp_path):
    analysis = main(["--output_dir", str(tmp_path)])
    assert analysis.diameter == pytest.approx(D_P, abs=1e-12)
    assert (tmp_path / "particleSize.tiff").exists()

from fluidbed_figures.generate_paper_figures import main


def test_synthetic_run_generates_all_figures(tmp_path, capsys):
    out = tmp_path / "Figures"
    main(["--output_dir", str(out), "--synthetic", "--bed_height", "0.2"])
    names = {p.name for p in out.iterdir()}
    assert {"particleSize.tiff", "StepResponseFigureInsert.tiff",
            "stepRespContr1.tiff", "stepRespValve1.tiff", "stepRespAll1.tiff"} <= names
    assert {f"Figure{k}.{ext}" for k in (8, 9, 10) for ext in ("tiff", "eps")} <= names
    assert "ALL FIGURES GENERATED SUCCESSFULLY" in capsys.readouterr().out


def test_without_tests_only_particle_size(tmp_path, capsys):
    main(["--output_dir", str(tmp_path)])
    assert {p.name for p in tmp_path.iterdir()} == {"particleSize.tiff"}
    assert "No step-response tests given" in capsys.readouterr().out

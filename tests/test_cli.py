"""Tests for the headless command line."""

import csv
import sys

import pytest

from linetool.__main__ import main


def _lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.strip()]


class TestHeadless:
    def test_straight(self, capsys):
        assert main(["--mode", "straight", "--start", "0,0", "--end", "100,0"]) == 0
        captured = capsys.readouterr()
        lines = _lines(captured.out)
        assert len(lines) == 5
        assert lines[0] == "0.0000 0.0000 0.0000 0.00"
        assert lines[-1].startswith("80.0000 ")
        assert "5 x (none)" in captured.err

    def test_circle_summary(self, capsys):
        argv = ["--mode", "circle", "--center", "0,0", "--radius-point", "50,0"]
        assert main(argv) == 0
        captured = capsys.readouterr()
        assert len(_lines(captured.out)) == 16
        assert "angle step 22.50" in captured.err

    def test_full_length(self, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "95,0",
                "--spacing-mode", "full_length"]
        assert main(argv) == 0
        assert len(_lines(capsys.readouterr().out)) == 6

    def test_footprint_fence(self, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "40,0",
                "--spacing", "3", "--spacing-mode", "fence",
                "--footprint", "Wooden Fence"]
        assert main(argv) == 0
        captured = capsys.readouterr()
        assert len(_lines(captured.out)) == 5
        assert "overlap" not in captured.err

    def test_ground_height(self, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "10,0", "--ground", "3"]
        assert main(argv) == 0
        assert _lines(capsys.readouterr().out)[0] == "0.0000 3.0000 0.0000 0.00"

    def test_curve_without_elbow(self, capsys):
        argv = ["--mode", "curve", "--start", "0,0", "--end", "100,0"]
        assert main(argv) == 0
        assert len(_lines(capsys.readouterr().out)) == 5

    def test_csv(self, tmp_path, capsys):
        out = tmp_path / "points.csv"
        argv = ["--mode", "straight", "--start", "0,0", "--end", "100,0", "--csv", str(out)]
        assert main(argv) == 0
        with open(out, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == ["x", "y", "z", "rotation"]
        assert len(rows) == 6
        assert float(rows[2][0]) == pytest.approx(20.0)


class TestErrors:
    def test_missing_end(self, capsys):
        assert main(["--mode", "straight", "--start", "0,0"]) == 1
        assert "--end" in capsys.readouterr().err

    def test_missing_radius_point(self, capsys):
        assert main(["--mode", "circle", "--center", "0,0"]) == 1
        assert "--radius-point" in capsys.readouterr().err

    def test_unknown_footprint(self, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "10,0", "--footprint", "Nope"]
        assert main(argv) == 1

    def test_missing_mesh(self, tmp_path, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "10,0",
                "--mesh", str(tmp_path / "nope.stl")]
        assert main(argv) == 1

    def test_bad_spacing(self, capsys):
        argv = ["--mode", "straight", "--start", "0,0", "--end", "10,0", "--spacing", "0"]
        assert main(argv) == 1

    def test_bad_point(self):
        with pytest.raises(SystemExit):
            main(["--mode", "straight", "--start", "a,b", "--end", "10,0"])


class TestGuiFallback:
    def test_missing_qt_points_to_headless_mode(self, monkeypatch, capsys):
        monkeypatch.setitem(sys.modules, "PyQt6.QtWidgets", None)
        assert main([]) == 1
        err = capsys.readouterr().err
        assert "linetool[gui]" in err
        assert "--mode straight" in err

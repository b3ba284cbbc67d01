"""Tests for the command-line interface and the sample data generator."""

import csv
import importlib.util
import json
import sys
from pathlib import Path

import pytest

from trip_analyze.cli import build_parser, main
from trip_analyze.csv_io import load_geo_points
from trip_analyze.trip import analyze_trip

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "generate_sample_trip_csv.py"


@pytest.fixture
def generator(monkeypatch):
    """Import scripts/generate_sample_trip_csv.py as a module."""

    spec = importlib.util.spec_from_file_location("generate_sample_trip_csv", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, spec.name, module)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def trace_csv(generator, tmp_path):
    rows = generator.generate_trace(
        seed=7,
        start_ms=1_735_718_400_000,
        start_lat=25.2048,
        start_lon=55.2708,
        legs=[
            generator.Leg(seconds=600, speed_kmh=30.0),
            generator.Leg(seconds=900, speed_kmh=45.0),
            generator.Leg(seconds=300, speed_kmh=20.0),
        ],
        stop_seconds=300,
        outlier_every=25,
    )
    path = tmp_path / "trace.csv"
    generator._write(path, rows)
    return path


@pytest.fixture
def still_accel_csv(tmp_path):
    path = tmp_path / "accel.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        w = csv.writer(f)
        w.writerow(["timestamp", "x", "y", "z"])
        for k in range(100):
            w.writerow([k * 50, 0.01, -0.01, 0.01])
    return path


class TestSampleGenerator:
    """The generated trace exercises the whole pipeline."""

    def test_generated_trip(self, trace_csv):
        points, summary = load_geo_points(trace_csv)
        assert summary.rows_parsed == 71
        report = analyze_trip(points)
        assert report.filtered_points == 69  # two GPS jumps removed
        assert len(report.stops) == 2
        assert all(s.duration_minutes >= 3 for s in report.stops)
        assert 17.0 < report.distance_km < 19.0

    def test_accel_rows(self, generator):
        rows = generator.generate_accel(seed=1, seconds=2.0, rate_hz=20.0, freq_hz=2.0, amplitude=3.0)
        assert len(rows) == 40
        assert set(rows[0]) == {"timestamp", "x", "y", "z"}


class TestCli:
    """Tests for the trip_analyze CLI."""

    def test_requires_subcommand(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_inspect(self, trace_csv, capsys):
        assert main(["inspect", "--csv", str(trace_csv), "--tz", "Asia/Dubai"]) == 0
        out = capsys.readouterr().out
        assert "rows=71" in out
        assert "疑似GPS异常点=2" in out

    def test_inspect_json(self, trace_csv, capsys):
        assert main(["inspect", "--csv", str(trace_csv), "--json"]) == 0
        out = capsys.readouterr().out
        payload = json.loads(out[out.index("{") :])
        assert payload["points"] == 71
        assert payload["rejected"] == 2
        assert payload["csv"]["rows_skipped"] == 0

    def test_analyze_trip_json(self, trace_csv, capsys):
        assert main(["analyze-trip", "--csv", str(trace_csv), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["completionStatus"] == "INCOMPLETE"
        assert payload["totalPointsCount"] == 71
        assert len(payload["stopPoints"]) == 2

    def test_analyze_trip_exports(self, trace_csv, tmp_path, capsys):
        stops_out = tmp_path / "stops.csv"
        route_out = tmp_path / "route.csv"
        code = main(
            [
                "analyze-trip",
                "--csv",
                str(trace_csv),
                "--stops-out",
                str(stops_out),
                "--route-out",
                str(route_out),
            ]
        )
        assert code == 0
        out = capsys.readouterr().out
        assert "INCOMPLETE" in out
        with stops_out.open(encoding="utf-8", newline="") as f:
            assert len(list(csv.DictReader(f))) == 2
        with route_out.open(encoding="utf-8", newline="") as f:
            assert len(list(csv.DictReader(f))) == 69

    def test_analyze_trip_target(self, trace_csv, capsys):
        points, _ = load_geo_points(trace_csv)
        end = max(points, key=lambda p: p.timestamp_ms)
        argv = [
            "analyze-trip",
            "--csv",
            str(trace_csv),
            "--target-lat",
            str(end.latitude),
            "--target-lon",
            str(end.longitude),
            "--json",
        ]
        assert main(argv) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["completionStatus"] == "COMPLETED"

    def test_classify(self, still_accel_csv, capsys):
        assert main(["classify", "--csv", str(still_accel_csv), "--window", "20", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert len(payload) == 5
        assert all(r["type"] == "STATIONARY" for r in payload)

    def test_classify_text(self, still_accel_csv, capsys):
        assert main(["classify", "--csv", str(still_accel_csv), "--no-smoothing"]) == 0
        out = capsys.readouterr().out
        assert out.count("type=STATIONARY") == 2

    def test_compress(self, trace_csv, tmp_path, capsys):
        out = tmp_path / "route.json"
        assert main(["compress", "--csv", str(trace_csv), "--out", str(out)]) == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["originalPointCount"] == 69
        assert data["compressedPoints"][0]["t"] == 0

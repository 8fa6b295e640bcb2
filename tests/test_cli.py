import json

import pytest

from tracepath.cli import main, parse_args, prompt_input_path


def _write_fixes(path):
    points = [
        {"lat": 52.0 + index * 0.001, "lon": 4.0 + index * 0.001, "timestamp": index * 60_000, "accuracy": 3.0}
        for index in range(5)
    ]
    path.write_text(json.dumps({"sessions": [{"id": "ride", "points": points}]}), encoding="utf-8")


def test_parse_args_defaults():
    args = parse_args([])
    assert args.format == "svg"
    assert args.range is None
    assert args.progress is None


def test_main_writes_svg_and_prints_replay(tmp_path, capsys):
    source = tmp_path / "fixes.json"
    _write_fixes(source)
    output = tmp_path / "out" / "track.svg"
    main(["-i", str(source), "-o", str(output), "--no-prompt", "--progress", "0.5", "--animate"])
    document = output.read_text(encoding="utf-8")
    assert document.startswith("<?xml")
    assert "<animate" in document
    printed = capsys.readouterr().out
    assert "Replay intervals" in printed
    assert "p=0.500: indicator at" in printed
    assert "Points: 5 across 1 session(s)" in printed


def test_main_gpx_with_date_window(tmp_path):
    source = tmp_path / "fixes.json"
    _write_fixes(source)
    output = tmp_path / "track.gpx"
    main(["-i", str(source), "-o", str(output), "-f", "gpx", "--start-date", "1969-12-31", "--end-date", "1970-01-02"])
    assert output.read_text(encoding="utf-8").count("<trkpt") == 5


def test_main_exits_when_window_is_empty(tmp_path):
    source = tmp_path / "fixes.json"
    _write_fixes(source)
    with pytest.raises(SystemExit):
        main(["-i", str(source), "-o", str(tmp_path / "x.svg"), "--range", "1h"])


def test_main_rejects_malformed_config(tmp_path):
    source = tmp_path / "fixes.json"
    _write_fixes(source)
    config = tmp_path / "tracepath.yaml"
    config.write_text("render: [width: 1", encoding="utf-8")
    with pytest.raises(SystemExit, match="Could not load configuration"):
        main(["-i", str(source), "-o", str(tmp_path / "x.svg"), "--no-prompt", "--config", str(config)])


def test_main_rejects_non_numeric_config_value(tmp_path):
    source = tmp_path / "fixes.json"
    _write_fixes(source)
    config = tmp_path / "tracepath.yaml"
    config.write_text("render:\n  width: wide\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="'width'"):
        main(["-i", str(source), "-o", str(tmp_path / "x.svg"), "--no-prompt", "--config", str(config)])


def test_replay_report_matches_animated_strokes(tmp_path, capsys):
    source = tmp_path / "gap.json"
    start_times = [0, 60_000, 120_000, 3_720_000, 3_780_000, 3_840_000]
    points = [
        {"lat": 52.0 + index * 0.002, "lon": 4.0 + (index % 2) * 0.003, "timestamp": ts, "accuracy": 3.0}
        for index, ts in enumerate(start_times)
    ]
    source.write_text(json.dumps({"sessions": [{"id": "ride", "points": points}]}), encoding="utf-8")
    output = tmp_path / "gap.svg"
    main(["-i", str(source), "-o", str(output), "--no-prompt", "--animate", "--progress", "0.5"])
    document = output.read_text(encoding="utf-8")
    printed = capsys.readouterr().out
    reported = [line for line in printed.splitlines() if line.strip().startswith("Segment ")]
    assert len(reported) == 2
    assert document.count('attributeName="stroke-dashoffset"') == len(reported)
    assert "Segments: 2 (2 drawn)" in printed


def test_prompt_input_path_retries_until_file_exists(tmp_path, monkeypatch, capsys):
    existing = tmp_path / "fixes.json"
    existing.write_text("[]", encoding="utf-8")
    answers = iter([str(tmp_path / "nope.json"), str(existing)])
    monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
    assert prompt_input_path(tmp_path / "default.json") == existing
    assert "File not found" in capsys.readouterr().out


def test_prompt_input_path_accepts_default(tmp_path, monkeypatch):
    default = tmp_path / "trace-export.json"
    default.write_text("[]", encoding="utf-8")
    monkeypatch.setattr("builtins.input", lambda prompt: "")
    assert prompt_input_path(default) == default

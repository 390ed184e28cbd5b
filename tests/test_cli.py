import io
import sys

import numpy as np
from PIL import Image

from theme_map.cli import main, parse_cli_args

BLACK_WHITE = 'palette: ["#000000", "#ffffff"]\npalette-affinity: 1.0\ncpus: 2\n'


def _write_settings(tmp_path, text=BLACK_WHITE):
    path = tmp_path / "settings.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    args = parse_cli_args([])

    assert args.settings.name == "settings.yaml"
    assert args.input is None
    assert args.output is None
    assert args.cpus is None
    assert not args.progress and not args.debug


def test_maps_file_to_file(tmp_path, capsys):
    settings = _write_settings(tmp_path)
    src = tmp_path / "in.png"
    Image.new("RGB", (4, 3), (16, 16, 16)).save(src)
    out = tmp_path / "out.png"

    status = main(["--settings", str(settings), "--input", str(src), "--output", str(out)])

    assert status == 0
    with Image.open(out) as mapped:
        assert mapped.size == (4, 3)
        assert np.array(mapped).max() == 0
    stdout = capsys.readouterr().out
    assert "[run]" in stdout
    assert f"Image mapped and saved at: {out}" in stdout


def test_progress_and_debug_output(tmp_path, capsys):
    settings = _write_settings(tmp_path)
    src = tmp_path / "in.png"
    Image.new("RGB", (3, 5), (240, 240, 240)).save(src)

    status = main(
        [
            "--settings", str(settings),
            "--input", str(src),
            "--output", str(tmp_path / "out.png"),
            "--cpus", "1",
            "--progress",
            "--debug",
        ]
    )

    assert status == 0
    stdout = capsys.readouterr().out
    assert "rows 5/5" in stdout
    assert "[debug]" in stdout
    assert "#ffffff: 15" in stdout


def test_missing_input_exits_2(tmp_path, capsys):
    settings = _write_settings(tmp_path)

    status = main(
        ["--settings", str(settings), "--input", str(tmp_path / "nope.png"), "--output", str(tmp_path / "o.png")]
    )

    assert status == 2
    assert "[error] not found" in capsys.readouterr().err


def test_bad_settings_exit_1(tmp_path, capsys):
    settings = _write_settings(tmp_path, "palette: []\npalette-affinity: 1\n")
    src = tmp_path / "in.png"
    Image.new("RGB", (2, 2)).save(src)
    out = tmp_path / "out.png"

    status = main(["--settings", str(settings), "--input", str(src), "--output", str(out)])

    assert status == 1
    assert "[error] palette must contain at least one colour" in capsys.readouterr().err
    assert not out.exists()


def test_undecodable_input_exits_1(tmp_path, capsys):
    settings = _write_settings(tmp_path)
    src = tmp_path / "in.png"
    src.write_bytes(b"not an image")

    status = main(["--settings", str(settings), "--input", str(src), "--output", str(tmp_path / "o.png")])

    assert status == 1
    assert "[error]" in capsys.readouterr().err


def test_streams_stdin_to_stdout_as_jpeg(tmp_path, monkeypatch, capsys, png_bytes):
    settings = _write_settings(tmp_path)
    stdin = io.TextIOWrapper(io.BytesIO(png_bytes(Image.new("RGB", (8, 8), (16, 16, 16)))))
    stdout = io.TextIOWrapper(io.BytesIO())
    monkeypatch.setattr(sys, "stdin", stdin)
    monkeypatch.setattr(sys, "stdout", stdout)

    status = main(["--settings", str(settings)])

    assert status == 0
    data = stdout.buffer.getvalue()
    assert data[:2] == b"\xff\xd8"
    with Image.open(io.BytesIO(data)) as mapped:
        assert mapped.format == "JPEG"
        assert mapped.size == (8, 8)
    err = capsys.readouterr().err
    assert "[run]" in err
    assert "Image mapped and saved at: <stdout>" in err


def test_undecodable_settings_exit_1(tmp_path, capsys):
    settings = _write_settings(tmp_path)
    settings.write_bytes(b"palette: [\"#000000\"]\n\xff\xfe\n")
    src = tmp_path / "in.png"
    Image.new("RGB", (2, 2)).save(src)

    status = main(["--settings", str(settings), "--input", str(src), "--output", str(tmp_path / "o.png")])

    assert status == 1
    assert "[error] cannot read settings" in capsys.readouterr().err

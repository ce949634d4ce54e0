import pytest

import zoom


def _config(*args):
    parser = zoom.build_parser()
    return zoom.resolve_run_config(parser.parse_args(list(args)), parser)


def test_defaults_resolve():
    config = _config()
    assert config.mode == "mandelbrot"
    assert config.size == 512
    assert config.final_zoom is None
    assert not config.preview


def test_mode_is_normalised():
    assert _config("--mode", "NEWTON").mode == "newton"


@pytest.mark.parametrize("args", [
    ["--size", "0"],
    ["--mode", "julia"],
    ["--zoom", "0"],
    ["--frames", "-1"],
    ["--zoom-factor", "-2"],
    ["--final-zoom", "0"],
    ["--easing", "bounce"],
])
def test_bad_options_are_rejected(args):
    with pytest.raises(SystemExit):
        _config(*args)


def test_run_renders_every_frame(capsys):
    config = _config("--size", "16", "--frames", "4", "--final-zoom", "100", "--mode", "newton")
    durations = zoom.run(config, "/CPU:0")
    assert len(durations) == 4
    assert all(duration >= 0 for duration in durations)
    assert "frame 3 out of 4" in capsys.readouterr().out


def test_run_stops_when_zoom_overflows(capsys):
    config = _config("--size", "8", "--frames", "3", "--zoom", "1e300", "--zoom-factor", "1e10")
    assert zoom.run(config, "/CPU:0") == []
    assert "Stopping at frame 0" in capsys.readouterr().out

import numpy as np
import PIL.Image
import pytest

import mandel
from mandelgray import new_buffer, render


def _read(path):
    with PIL.Image.open(path) as image:
        return image.format, np.asarray(image).tobytes()


def test_renders_image(tmp_path):
    output = tmp_path / "mandel.png"
    mandel.main([str(output), "16x12", "-1.20,0.35", "-1,0.20"])

    expected = new_buffer((16, 12))
    render(expected, (16, 12), complex(-1.20, 0.35), complex(-1.0, 0.20))
    image_format, data = _read(output)
    assert image_format == "PNG"
    assert data == expected.tobytes()


def test_workers_produce_the_same_image(tmp_path):
    sequential = tmp_path / "sequential.png"
    parallel = tmp_path / "parallel.png"
    mandel.main([str(sequential), "24x18", "-2.0,1.2", "0.6,-1.2"])
    mandel.main([str(parallel), "24x18", "-2.0,1.2", "0.6,-1.2", "--workers", "3"])
    assert _read(parallel) == _read(sequential)


def test_format_option(tmp_path):
    output = tmp_path / "mandel.img"
    mandel.main(["--format", "bmp", str(output), "8x6", "-2,1", "1,-1"])
    image_format, data = _read(output)
    assert image_format == "BMP"
    assert len(data) == 48


@pytest.mark.parametrize("argv", [[], ["mandel.png"], ["mandel.png", "10x10", "-1,1"]])
def test_missing_arguments_print_usage_and_example(argv, capsys):
    with pytest.raises(SystemExit) as excinfo:
        mandel.main(argv)
    assert excinfo.value.code != 0
    err = capsys.readouterr().err
    assert "usage: mandel" in err
    assert "example: mandel mandel.png 1000x750 -1.20,0.35 -1,0.20" in err


def test_extra_arguments_are_rejected(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        mandel.main([str(tmp_path / "a.png"), "10x10", "-1,1", "1,-1", "extra"])
    assert excinfo.value.code != 0
    assert "example:" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv,message",
    [
        (["10by10", "-1,1", "1,-1"], "error parsing image dimensions"),
        (["0x10", "-1,1", "1,-1"], "error parsing image dimensions"),
        (["10x10", "-1;1", "1,-1"], "error parsing upper left corner point"),
        (["10x10", "-1,1", ",-1"], "error parsing lower right corner point"),
    ],
)
def test_parse_errors_are_fatal(argv, message, tmp_path, capsys):
    output = tmp_path / "mandel.png"
    with pytest.raises(SystemExit) as excinfo:
        mandel.main([str(output), *argv])
    assert excinfo.value.code == 2
    assert message in capsys.readouterr().err
    assert not output.exists()


def test_invalid_workers(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        mandel.main([str(tmp_path / "a.png"), "10x10", "-1,1", "1,-1", "--workers", "0"])
    assert excinfo.value.code == 2
    assert "--workers" in capsys.readouterr().err


def test_unknown_format(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        mandel.main([str(tmp_path / "a.nope"), "10x10", "-1,1", "1,-1"])
    assert excinfo.value.code == 2
    assert "unsupported image format" in capsys.readouterr().err


def test_write_failure_exits_with_error(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(SystemExit) as excinfo:
        mandel.main([str(blocker / "mandel.png"), "4x4", "-1,1", "1,-1"])
    assert excinfo.value.code == 1
    assert "error writing image file" in capsys.readouterr().err


def test_verbose_logging(tmp_path, capsys):
    mandel.main([str(tmp_path / "a.png"), "4x4", "-1,1", "1,-1", "-v"])
    out = capsys.readouterr().out
    assert "Rendering 4x4 pixels" in out
    assert "Saved PNG image to" in out

    mandel.main([str(tmp_path / "b.png"), "4x4", "-1,1", "1,-1"])
    assert capsys.readouterr().out == ""


def test_tensorflow_backend(tmp_path):
    pytest.importorskip("tensorflow")
    sequential = tmp_path / "sequential.png"
    tensor = tmp_path / "tensor.png"
    mandel.main([str(sequential), "20x20", "-2,1.5", "1,-1.5"])
    mandel.main([str(tensor), "20x20", "-2,1.5", "1,-1.5", "--backend", "tensorflow"])
    assert _read(tensor) == _read(sequential)


@pytest.mark.parametrize("coordinate", ["-1.20,0.35", "-1,-0.2", "-.5,1", "-2e-1,0"])
def test_negative_coordinates_are_positionals(coordinate):
    opt = mandel.build_parser().parse_args(["-v", "mandel.png", "10x10", coordinate, coordinate])
    assert opt.upper_left == coordinate
    assert opt.lower_right == coordinate
    assert opt.verbose


def test_negative_coordinates_do_not_shadow_options():
    opt = mandel.build_parser().parse_args(["mandel.png", "10x10", "-1,1", "1,-1", "--workers", "2", "-v"])
    assert opt.upper_left == "-1,1"
    assert opt.workers == 2
    assert opt.verbose

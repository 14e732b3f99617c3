"""Tests for the command line interface."""

import io
from unittest.mock import MagicMock, patch

import pytest

from asciistag.cli import build_params, create_parser, main, run
from asciistag.config import RenderParams
from asciistag.errors import LoadError, ValidationError
from asciistag.glyphs import GlyphRamp
from asciistag.interpolation import InterpolationMethod
from asciistag.player import PlaybackStats


class TestParser:
    def test_full_argument_set(self):
        args = create_parser().parse_args(
            [
                "-i", "in.png", "-o", "out.txt", "-c", "blocks", "--color",
                "--invert", "--invert-colors", "-b", "1.5", "-s", "3",
                "--edges", "--aspect-ratio", "1.8", "--fit", "-d", "40",
                "--block-width", "2", "--block-height", "4",
                "--interpolation", "linear",
            ]
        )
        params = build_params(args)
        assert params == RenderParams(
            input_path="in.png",
            output_path="out.txt",
            ramp=GlyphRamp.BLOCKS,
            color=True,
            invert=True,
            invert_colors=True,
            brightness=1.5,
            edges=True,
            scale=3.0,
            aspect_ratio=1.8,
            auto_fit=True,
            block_width=2,
            block_height=4,
            interpolation=InterpolationMethod.LINEAR,
            frame_delay_ms=40.0,
        )

    def test_defaults(self):
        params = build_params(create_parser().parse_args(["-i", "in.png"]))
        assert params == RenderParams(input_path="in.png")

    def test_original_size(self):
        args = create_parser().parse_args(["-i", "a.png", "--fit", "--original-size"])
        assert args.auto_fit is False

    def test_literal_ramp(self):
        params = build_params(create_parser().parse_args(["-i", "a.png", "-c", " .#"]))
        assert params.ramp == " .#"

    def test_bad_value_is_validation_error(self):
        with pytest.raises(ValidationError):
            create_parser().parse_args(["-i", "a.png", "-s", "abc"])


class TestRun:
    def test_still_image_to_stream(self, png_file):
        stream = io.StringIO()
        params = RenderParams(input_path=str(png_file), ramp=" @", aspect_ratio=1.0)
        run(params, stream)
        assert stream.getvalue() == "  @@\n" * 4

    def test_gif_to_file_writes_first_frame(self, gif_file, tmp_path):
        out = tmp_path / "frame.txt"
        params = RenderParams(
            input_path=str(gif_file), output_path=str(out), ramp=" @", aspect_ratio=1.0
        )
        run(params)
        # First frame is black
        assert out.read_text(encoding="utf-8") == "    \n" * 4

    def test_gif_is_played(self, gif_file):
        params = RenderParams(input_path=str(gif_file))
        with patch("asciistag.cli.PlaybackLoop") as loop_class:
            loop_class.return_value.play.return_value = PlaybackStats(frames_rendered=3)
            run(params)
        source = loop_class.return_value.play.call_args.args[0]
        assert source.is_multi_frame

    def test_single_frame_gif_is_printed(self, tmp_path, gif_writer):
        path = gif_writer(tmp_path / "still.gif", [255])
        stream = io.StringIO()
        params = RenderParams(input_path=str(path), ramp=" @", aspect_ratio=1.0)
        with patch("asciistag.cli.PlaybackLoop") as loop_class:
            run(params, stream)
        loop_class.assert_not_called()
        assert stream.getvalue() == "@@@@\n" * 4

    def test_empty_source(self):
        source = MagicMock()
        source.is_multi_frame = False
        source.next_frame.return_value = None
        source.__enter__.return_value = source
        with patch("asciistag.cli.open_source", return_value=source):
            with pytest.raises(LoadError):
                run(RenderParams(input_path="empty.gif"))


class TestMain:
    """Exit codes."""

    def test_success(self, png_file, capsys):
        assert main(["-i", str(png_file), "-c", " @", "--aspect-ratio", "1"]) == 0
        assert capsys.readouterr().out == "  @@\n" * 4

    def test_help(self, capsys):
        assert main(["--help"]) == 0
        assert "--input" in capsys.readouterr().out

    def test_help_describes_aspect_as_height_over_width(self, capsys):
        assert main(["--help"]) == 0
        assert "height/width" in capsys.readouterr().out

    def test_missing_input(self, capsys):
        assert main([]) == 1
        err = capsys.readouterr().err
        assert "Input image path required" in err
        assert "usage:" in err

    def test_empty_ramp(self, png_file, capsys):
        assert main(["-i", str(png_file), "-c", ""]) == 1
        assert "usage:" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "extra",
        [
            ["-s", "0"],
            ["-s", "-2"],
            ["--aspect-ratio", "0"],
            ["-b", "-1"],
            ["-d", "-5"],
            ["--block-width", "0"],
        ],
    )
    def test_invalid_values(self, png_file, capsys, extra):
        assert main(["-i", str(png_file)] + extra) == 1
        assert "Error:" in capsys.readouterr().err

    @pytest.mark.parametrize("scale", ["1e-320", "1e-9"])
    def test_extreme_scale(self, png_file, capsys, scale):
        assert main(["-i", str(png_file), "-s", scale]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unparseable_value(self, capsys):
        assert main(["-i", "a.png", "-s", "abc"]) == 1
        assert "usage:" in capsys.readouterr().err

    def test_unknown_interpolation(self, capsys):
        assert main(["-i", "a.png", "--interpolation", "cubic"]) == 1

    def test_missing_file(self, tmp_path, capsys):
        path = str(tmp_path / "missing.png")
        assert main(["-i", path]) == 1
        err = capsys.readouterr().err
        assert f"Failed to load {path}: file not found" in err

    def test_unwritable_output(self, png_file, tmp_path, capsys):
        out = str(tmp_path / "nodir" / "out.txt")
        assert main(["-i", str(png_file), "-o", out]) == 1
        assert "Failed to write" in capsys.readouterr().err

    def test_output_file(self, png_file, tmp_path, capsys):
        out = tmp_path / "out.txt"
        code = main(
            ["-i", str(png_file), "-o", str(out), "-c", " @", "--aspect-ratio", "1"]
        )
        assert code == 0
        assert out.read_text(encoding="utf-8") == "  @@\n" * 4
        assert capsys.readouterr().out == ""

"""
Tests for the ripview CLI
=========================

Commands run in-process through click's CliRunner. Serial access is
patched out.

Test Categories
---------------
1. Decode Tests: command listing and decode failures
2. Render Tests: PNG output, scaling and error exit codes
3. Listen Tests: live rendering from a mocked port
4. Ports Tests: port enumeration output
5. Error Handler Tests: exit code mapping
"""

from unittest.mock import Mock, patch

import click
import pytest
from click.testing import CliRunner
from PIL import Image

from ripscrip import __version__
from ripscrip.cli.errors import ExitCode, handle_cli_exception
from ripscrip.cli.ripview import main
from ripscrip.config import set_default_config
from ripscrip.errors import ConnectionError, InvalidNumeralError
from ripscrip.transport import PortInfo


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def scene(tmp_path):
    path = tmp_path / "scene.rip"
    path.write_bytes(b"Welcome!\r\n!|*|c0E\r\n!|a0001|E\r\n")
    return path


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


# =============================================================================
# Decode Tests
# =============================================================================

class TestDecodeCommand:
    def test_lists_commands(self, runner, scene):
        result = runner.invoke(main, ["decode", str(scene)])
        assert result.exit_code == 0
        assert "ResetWindows" in result.output
        assert "Color" in result.output
        assert "OnePalette" in result.output
        assert "2 batch(es), 0 error(s)" in result.output

    def test_bad_batch_exits_with_rip_error(self, runner, tmp_path):
        path = tmp_path / "bad.rip"
        path.write_bytes(b"!|c99\r\n!|H\r\n")
        result = runner.invoke(main, ["decode", str(path)])
        assert result.exit_code == ExitCode.RIP_ERROR
        assert "Home" in result.output
        assert "1 batch(es), 1 error(s)" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["decode", str(tmp_path / "missing.rip")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Render Tests
# =============================================================================

class TestRenderCommand:
    def test_writes_png(self, runner, scene, tmp_path):
        output = tmp_path / "scene.png"
        result = runner.invoke(main, ["render", str(scene), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "Wrote" in result.output
        with Image.open(output) as image:
            assert image.size == (640, 350)
            assert image.convert("RGB").getpixel((100, 100)) == (0, 0, 170)

    def test_scale_and_chunk_size(self, runner, scene, tmp_path):
        output = tmp_path / "scene.png"
        result = runner.invoke(main, ["render", str(scene), "-o", str(output),
                                      "--scale", "2", "--chunk-size", "1"])
        assert result.exit_code == 0, result.output
        assert "(1280x700" in result.output
        with Image.open(output) as image:
            assert image.size == (1280, 700)

    def test_errors_are_reported(self, runner, tmp_path):
        path = tmp_path / "bad.rip"
        path.write_bytes(b"!|c99\r\n!|v0A000000\r\n!|c01\r\n")
        output = tmp_path / "bad.png"
        result = runner.invoke(main, ["render", str(path), "-o", str(output)])
        assert result.exit_code == ExitCode.RIP_ERROR
        assert output.exists()
        assert "Decode errors:" in result.output
        assert "Render errors:" in result.output

    def test_relative_output_goes_under_output_dir(self, runner, scene, tmp_path,
                                                   monkeypatch):
        frames = tmp_path / "frames"
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)
        monkeypatch.setenv("RIPSCRIP_OUTPUT_DIR", str(frames))
        set_default_config(None)
        try:
            result = runner.invoke(main, ["render", str(scene), "-o", "scene.png"])
        finally:
            set_default_config(None)

        assert result.exit_code == 0, result.output
        assert (frames / "scene.png").is_file()
        assert not (workdir / "scene.png").exists()

    def test_output_required(self, runner, scene):
        result = runner.invoke(main, ["render", str(scene)])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_invalid_scale(self, runner, scene, tmp_path):
        result = runner.invoke(main, ["render", str(scene), "-o",
                                      str(tmp_path / "x.png"), "--scale", "0"])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Listen Tests
# =============================================================================

class TestListenCommand:
    def test_renders_stream(self, runner, tmp_path):
        output = tmp_path / "live.png"
        port = Mock(is_open=True)
        with patch("ripscrip.cli.ripview.open_serial_port", return_value=port) as opener, \
             patch("ripscrip.cli.ripview.iter_port_chunks",
                   return_value=iter([b"!|*|a00", b"04|E\r\n", b"!|c0"])):
            result = runner.invoke(main, ["listen", "-p", "/dev/ttyUSB0",
                                          "-b", "9600", "-o", str(output)])

        assert result.exit_code == ExitCode.RIP_ERROR, result.output
        assert opener.call_args.args == ("/dev/ttyUSB0",)
        assert opener.call_args.kwargs["baud_rate"] == 9600
        port.close.assert_called_once()
        with Image.open(output) as image:
            assert image.convert("RGB").getpixel((5, 5)) == (170, 0, 0)

    def test_clean_stream(self, runner, tmp_path):
        output = tmp_path / "live.png"
        with patch("ripscrip.cli.ripview.open_serial_port", return_value=Mock(is_open=True)), \
             patch("ripscrip.cli.ripview.iter_port_chunks",
                   return_value=iter([b"!|*\r\n"])):
            result = runner.invoke(main, ["listen", "-p", "COM3", "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert "Listening on COM3 at 2400 baud" in result.output

    def test_relative_output_goes_under_output_dir(self, runner, tmp_path, monkeypatch):
        frames = tmp_path / "frames"
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RIPSCRIP_OUTPUT_DIR", str(frames))
        set_default_config(None)
        try:
            with patch("ripscrip.cli.ripview.open_serial_port", return_value=Mock(is_open=True)), \
                 patch("ripscrip.cli.ripview.iter_port_chunks",
                       return_value=iter([b"!|*\r\n"])):
                result = runner.invoke(main, ["listen", "-p", "COM3", "-o", "live.png"])
        finally:
            set_default_config(None)

        assert result.exit_code == 0, result.output
        assert (frames / "live.png").is_file()
        assert not (tmp_path / "live.png").exists()

    def test_connection_error(self, runner, tmp_path):
        with patch("ripscrip.cli.ripview.open_serial_port",
                   side_effect=ConnectionError("Serial port not found: COM9")):
            result = runner.invoke(main, ["listen", "-p", "COM9",
                                          "-o", str(tmp_path / "x.png")])
        assert result.exit_code == ExitCode.RIP_ERROR
        assert "Serial port not found" in result.output

    def test_invalid_baud(self, runner, tmp_path):
        result = runner.invoke(main, ["listen", "-p", "COM3", "-b", "1234",
                                      "-o", str(tmp_path / "x.png")])
        assert result.exit_code == ExitCode.INVALID_ARGS


# =============================================================================
# Ports Tests
# =============================================================================

class TestPortsCommand:
    def test_lists_ports(self, runner):
        with patch("ripscrip.cli.ripview.list_serial_ports",
                   return_value=[PortInfo("/dev/ttyUSB0", "USB Modem")]):
            result = runner.invoke(main, ["ports"])
        assert result.exit_code == 0
        assert "/dev/ttyUSB0 - USB Modem" in result.output

    def test_no_ports(self, runner):
        with patch("ripscrip.cli.ripview.list_serial_ports", return_value=[]):
            result = runner.invoke(main, ["ports"])
        assert "No serial ports found." in result.output


# =============================================================================
# Error Handler Tests
# =============================================================================

class TestHandleCliException:
    @pytest.mark.parametrize("error,code", [
        (InvalidNumeralError("bad digit"), ExitCode.RIP_ERROR),
        (ConnectionError("no port"), ExitCode.RIP_ERROR),
        (ValueError("bad value"), ExitCode.INVALID_ARGS),
        (click.BadParameter("bad option"), ExitCode.INVALID_ARGS),
        (FileNotFoundError("missing"), ExitCode.INVALID_ARGS),
        (PermissionError("denied"), ExitCode.INVALID_ARGS),
        (RuntimeError("boom"), ExitCode.INTERNAL_ERROR),
    ])
    def test_exit_codes(self, error, code):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(error)
        assert exc_info.value.code == code

    def test_error_type_prefix(self, capsys):
        with pytest.raises(SystemExit):
            handle_cli_exception(ConnectionError("no port"), error_type="Listen")
        assert "Listen error: no port" in capsys.readouterr().err

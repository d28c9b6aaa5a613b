"""
ripview - RIPscrip Viewer Command-Line Interface
================================================

Decodes RIPscrip scenes and renders them to PNG images, either from a
captured file or live from a serial line connected to a BBS modem.

Usage Examples
--------------
List the commands in a captured scene:
    $ ripview decode welcome.rip

Render a scene at double size:
    $ ripview render welcome.rip -o welcome.png --scale 2

Render whatever a BBS sends until the line goes quiet:
    $ ripview listen --port /dev/ttyUSB0 --baud 2400 -o screen.png

List available serial ports:
    $ ripview ports

Exit Codes
----------
0 - Success
1 - Decode, render or transport error
2 - Invalid arguments or missing files
3 - Internal error

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from ripscrip import __version__
from ripscrip.cli.errors import ExitCode, handle_cli_exception
from ripscrip.config import ViewerConfig, get_default_config
from ripscrip.display import ImageCanvas
from ripscrip.errors import DecodeError
from ripscrip.protocol import StreamDecoder
from ripscrip.session import Session
from ripscrip.transport import (
    VALID_BAUD_RATES,
    close_serial_port,
    iter_file_chunks,
    iter_port_chunks,
    list_serial_ports,
    open_serial_port,
)

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores verbosity and the viewer configuration.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: ViewerConfig = get_default_config()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.INFO
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def finish_session(session: Session, canvas: ImageCanvas, output: Path, scale: int) -> None:
    """Save the rendered image and report errors; exits 1 if any occurred."""
    canvas.save(output, scale=scale)
    width, height = canvas.size
    click.echo(f"Wrote {output} ({width * scale}x{height * scale}, "
               f"{session.interpreter.applied} commands, {canvas.frames} frames)")

    if session.has_errors():
        click.echo(session.report(), err=True)
        sys.exit(ExitCode.RIP_ERROR)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="ripview")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Decode and render RIPscrip graphics.

    RIPscrip is the vector graphics protocol BBSes sent over modem
    lines. ripview turns captured or live RIPscrip streams into PNG
    images.
    """
    ctx.verbose = verbose
    ctx.setup_logging()


# =============================================================================
# Decode Command
# =============================================================================

@main.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def decode(ctx: Context, input_file: Path) -> None:
    """
    List the commands in a RIPscrip file.

    Prints one command per line, prefixed with its batch number.
    Batches that fail to decode are reported on stderr and skipped.

    Example:
        ripview decode welcome.rip
    """
    try:
        decoder = StreamDecoder(ctx.config.text_encoding)
        decoder.push(input_file.read_bytes())
        decoder.close()

        failures = 0
        while True:
            try:
                batch = decoder.next_batch()
            except DecodeError as e:
                failures += 1
                click.echo(f"{input_file}: {e}", err=True)
                continue
            if batch is None:
                break
            for command in batch:
                click.echo(f"{decoder.batches:5d}  {command!r}")

        click.echo(f"{decoder.batches} batch(es), {failures} error(s)")
        if failures:
            sys.exit(ExitCode.RIP_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Decode")


# =============================================================================
# Render Command
# =============================================================================

@main.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output image file (format from suffix, e.g. .png); relative "
         "paths go under RIPSCRIP_OUTPUT_DIR when set",
)
@click.option(
    "-s", "--scale",
    type=click.IntRange(min=1),
    default=None,
    help="Integer zoom factor for the output image (default: 1)",
)
@click.option(
    "--chunk-size",
    type=click.IntRange(min=1),
    default=None,
    help="Bytes fed to the decoder per chunk (default: 256)",
)
@pass_context
def render(ctx: Context, input_file: Path, output: Path,
           scale: Optional[int], chunk_size: Optional[int]) -> None:
    """
    Render a RIPscrip file to an image.

    The file is streamed through the decoder in chunks, exactly as it
    would arrive over a modem line.

    Example:
        ripview render welcome.rip -o welcome.png --scale 2
    """
    config = ctx.config
    scale = scale or config.scale
    chunk_size = chunk_size or config.chunk_size

    try:
        output = config.resolve_output(output)
        canvas = ImageCanvas(config.screen_width, config.screen_height)
        session = Session(canvas, encoding=config.text_encoding)
        session.run(iter_file_chunks(input_file, chunk_size))
        logger.debug("%s: %d batches decoded", input_file, session.decoder.batches)

        finish_session(session, canvas, output, scale)

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Render")


# =============================================================================
# Listen Command
# =============================================================================

@main.command()
@click.option(
    "-p", "--port",
    type=str,
    required=True,
    help="Serial port device (e.g. /dev/ttyUSB0, COM3)",
)
@click.option(
    "-b", "--baud",
    type=click.Choice([str(b) for b in VALID_BAUD_RATES]),
    default=None,
    help="Baud rate (default: 2400)",
)
@click.option(
    "--idle-timeout",
    type=float,
    default=None,
    help="Stop after this many seconds without data (default: 5)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output image file; relative paths go under RIPSCRIP_OUTPUT_DIR when set",
)
@click.option(
    "-s", "--scale",
    type=click.IntRange(min=1),
    default=None,
    help="Integer zoom factor for the output image (default: 1)",
)
@pass_context
def listen(ctx: Context, port: str, baud: Optional[str], idle_timeout: Optional[float],
           output: Path, scale: Optional[int]) -> None:
    """
    Render a live RIPscrip stream from a serial port.

    Reads until the line stays idle for the idle timeout, then writes
    the final screen.

    Example:
        ripview listen --port /dev/ttyUSB0 -o screen.png
    """
    config = ctx.config
    baud_rate = int(baud) if baud else config.baud_rate
    idle = idle_timeout if idle_timeout is not None else config.idle_timeout
    scale = scale or config.scale

    try:
        output = config.resolve_output(output)
        canvas = ImageCanvas(config.screen_width, config.screen_height)
        session = Session(canvas, encoding=config.text_encoding)

        serial_port = open_serial_port(port, baud_rate=baud_rate,
                                       timeout=config.serial_timeout)
        try:
            click.echo(f"Listening on {port} at {baud_rate} baud (Ctrl+C to stop)...")
            try:
                for chunk in iter_port_chunks(serial_port, config.chunk_size, idle):
                    session.feed(chunk)
            except KeyboardInterrupt:
                click.echo("\nInterrupted")
        finally:
            close_serial_port(serial_port)

        session.finish()
        finish_session(session, canvas, output, scale)

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Listen")


# =============================================================================
# Ports Command
# =============================================================================

@main.command()
def ports() -> None:
    """
    List available serial ports.

    Example:
        ripview ports
    """
    port_list = list_serial_ports()

    if not port_list:
        click.echo("No serial ports found.")
        return

    click.echo("Available serial ports:")
    for info in port_list:
        click.echo(f"  {info}")


if __name__ == "__main__":
    main()

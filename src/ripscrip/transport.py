"""
Byte Sources for RIPscrip Streams
=================================

RIPscrip scenes arrive either as captured files or live over a serial
line from a BBS modem. Both are exposed as iterators of byte chunks, so
the session code never cares where the bytes came from.

Serial Port Settings
--------------------
- Baud Rate: 2400 by default (300 to 115200 accepted)
- Data Bits: 8
- Parity: None
- Stop Bits: 1
- Flow Control: None
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Iterator, Optional, Union

import serial
import serial.tools.list_ports

from ripscrip.errors import ConnectionError, TransportError

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

VALID_BAUD_RATES: Final[tuple[int, ...]] = (
    300, 1200, 2400, 4800, 9600, 19200, 38400, 57600, 115200,
)

DEFAULT_BAUD_RATE: Final[int] = 2400

# Serial read timeout in seconds
DEFAULT_TIMEOUT: Final[float] = 0.5

DEFAULT_CHUNK_SIZE: Final[int] = 256


# =============================================================================
# Port Enumeration
# =============================================================================

@dataclass(frozen=True)
class PortInfo:
    """
    Information about an available serial port.

    Attributes:
        device: System device path (e.g., '/dev/ttyUSB0', 'COM3')
        description: Human-readable description from the driver
        vid: USB Vendor ID (None for non-USB ports)
    """

    device: str
    description: str
    vid: Optional[int] = None

    def __str__(self) -> str:
        if self.description:
            return f"{self.device} - {self.description}"
        return self.device


def list_serial_ports() -> list[PortInfo]:
    """List all serial ports detected by the system."""
    ports = []
    for port in serial.tools.list_ports.comports():
        ports.append(PortInfo(
            device=port.device,
            description=port.description or "",
            vid=port.vid,
        ))
        logger.debug("Found port: %s", port.device)
    return ports


# =============================================================================
# Port Configuration
# =============================================================================

def open_serial_port(
    device: str,
    baud_rate: int = DEFAULT_BAUD_RATE,
    timeout: float = DEFAULT_TIMEOUT,
) -> serial.Serial:
    """
    Open a serial port at 8N1 with no flow control.

    Args:
        device: Serial port device path (e.g., '/dev/ttyUSB0', 'COM3').
        baud_rate: One of VALID_BAUD_RATES.
        timeout: Read timeout in seconds.

    Returns:
        Configured and opened serial.Serial object. The caller closes it.

    Raises:
        ConnectionError: If the port cannot be opened.
        ValueError: If baud_rate is not a valid value.
    """
    if baud_rate not in VALID_BAUD_RATES:
        valid_str = ", ".join(str(b) for b in VALID_BAUD_RATES)
        raise ValueError(
            f"Invalid baud rate: {baud_rate}. Valid rates: {valid_str}"
        )

    logger.info("Opening serial port: %s at %d baud", device, baud_rate)

    try:
        port = serial.Serial(
            port=device,
            baudrate=baud_rate,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE,
            timeout=timeout,
            xonxoff=False,
            rtscts=False,
            dsrdtr=False,
        )
        port.reset_input_buffer()
        return port

    except serial.SerialException as e:
        error_msg = str(e)

        if "Permission denied" in error_msg:
            raise ConnectionError(
                f"Permission denied accessing {device}. "
                "You may need to add your user to the 'dialout' group: "
                "sudo usermod -a -G dialout $USER"
            )
        elif "No such file" in error_msg or "not found" in error_msg.lower():
            raise ConnectionError(
                f"Serial port not found: {device}. "
                "Use 'ripview ports' to list available ports."
            )
        elif "busy" in error_msg.lower() or "in use" in error_msg.lower():
            raise ConnectionError(
                f"Serial port {device} is busy. "
                "Close any other programs using the port."
            )
        else:
            raise ConnectionError(f"Cannot open {device}: {e}")


def close_serial_port(port: Optional[serial.Serial]) -> None:
    """Close a serial port, logging (not raising) errors during close."""
    if port is None:
        return

    try:
        if port.is_open:
            port.close()
            logger.debug("Serial port closed")
    except serial.SerialException as e:
        logger.warning("Error closing serial port: %s", e)


# =============================================================================
# Chunk Iterators
# =============================================================================

def iter_port_chunks(
    port: serial.Serial,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    idle_timeout: Optional[float] = None,
) -> Iterator[bytes]:
    """
    Yield byte chunks from an open serial port.

    Each read returns whatever arrived within the port's read timeout,
    up to chunk_size bytes. Empty reads are not yielded.

    Args:
        port: Open serial port
        chunk_size: Maximum bytes per read
        idle_timeout: Stop after this many seconds without data;
                      None reads until the port fails or the caller stops.

    Raises:
        TransportError: The port failed while reading.
    """
    last_data = time.monotonic()
    while True:
        try:
            data = port.read(chunk_size)
        except serial.SerialException as e:
            raise TransportError(f"Serial read failed: {e}") from e

        if data:
            last_data = time.monotonic()
            yield data
        elif idle_timeout is not None and time.monotonic() - last_data >= idle_timeout:
            logger.info("No data for %.1fs, stopping", idle_timeout)
            return


def iter_file_chunks(
    path: Union[str, Path],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[bytes]:
    """Yield a file's contents in chunks of at most chunk_size bytes."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            yield chunk

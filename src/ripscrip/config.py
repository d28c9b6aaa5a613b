"""
RIPscrip Viewer - Configuration
===============================

Viewer settings: output scaling, stream chunking and serial defaults.
Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (applied by the CLI on top of these)

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import os

from ripscrip.display.state import SCREEN_HEIGHT, SCREEN_WIDTH
from ripscrip.protocol.decoder import DEFAULT_ENCODING


@dataclass
class ViewerConfig:
    """
    Configuration for decoding and rendering RIPscrip streams.

    Attributes:
        screen_width: Initial surface width in pixels (default: 640)
        screen_height: Initial surface height in pixels (default: 350)
        scale: Integer zoom applied to exported images (default: 1)
        chunk_size: Bytes read per chunk from files and ports (default: 256)
        baud_rate: Serial line speed (default: 2400, typical of RIP-era BBSes)
        serial_timeout: Serial read timeout in seconds (default: 0.5)
        idle_timeout: Stop listening after this many quiet seconds (default: 5.0)
        output_dir: Base directory for relative output paths (default: None)
        text_encoding: Codec for the byte stream (default: cp437)
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # DISPLAY
    # ═══════════════════════════════════════════════════════════════════════════

    screen_width: int = SCREEN_WIDTH
    screen_height: int = SCREEN_HEIGHT
    scale: int = 1

    # ═══════════════════════════════════════════════════════════════════════════
    # STREAM
    # ═══════════════════════════════════════════════════════════════════════════

    chunk_size: int = 256
    baud_rate: int = 2400
    serial_timeout: float = 0.5
    idle_timeout: float = 5.0
    text_encoding: str = DEFAULT_ENCODING

    # ═══════════════════════════════════════════════════════════════════════════
    # OUTPUT
    # ═══════════════════════════════════════════════════════════════════════════

    output_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ViewerConfig":
        """
        Create ViewerConfig from environment variables.

        Environment variables (all optional):
            RIPSCRIP_SCALE: Image zoom factor (positive integer)
            RIPSCRIP_CHUNK_SIZE: Read chunk size in bytes (positive integer)
            RIPSCRIP_BAUD: Serial baud rate (integer)
            RIPSCRIP_IDLE_TIMEOUT: Idle timeout in seconds (float)
            RIPSCRIP_OUTPUT_DIR: Frame output directory

        Invalid values are ignored and the default is kept.

        Returns:
            ViewerConfig with values from environment variables
        """
        config = cls()

        if scale := os.environ.get("RIPSCRIP_SCALE"):
            try:
                if int(scale) >= 1:
                    config.scale = int(scale)
            except ValueError:
                pass  # Ignore invalid values

        if chunk_size := os.environ.get("RIPSCRIP_CHUNK_SIZE"):
            try:
                if int(chunk_size) >= 1:
                    config.chunk_size = int(chunk_size)
            except ValueError:
                pass

        if baud := os.environ.get("RIPSCRIP_BAUD"):
            try:
                config.baud_rate = int(baud)
            except ValueError:
                pass

        if idle := os.environ.get("RIPSCRIP_IDLE_TIMEOUT"):
            try:
                config.idle_timeout = float(idle)
            except ValueError:
                pass

        if output_dir := os.environ.get("RIPSCRIP_OUTPUT_DIR"):
            config.output_dir = Path(output_dir)

        return config

    def ensure_output_dir(self) -> Path:
        """Create the output directory if needed and return it."""
        path = self.output_dir if self.output_dir is not None else Path.cwd()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def resolve_output(self, path: Path) -> Path:
        """Place a relative output path under output_dir, when one is set."""
        if self.output_dir is None or path.is_absolute():
            return path
        return self.ensure_output_dir() / path


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL DEFAULT
# ═══════════════════════════════════════════════════════════════════════════════

_default_config: Optional[ViewerConfig] = None


def get_default_config() -> ViewerConfig:
    """
    Get the default viewer configuration.

    Loaded from the environment on first use. Can be overridden by
    calling set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = ViewerConfig.from_env()
    return _default_config


def set_default_config(config: Optional[ViewerConfig]) -> None:
    """Override the default configuration; None reloads from the environment."""
    global _default_config
    _default_config = config

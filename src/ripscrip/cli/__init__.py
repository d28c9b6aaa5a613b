"""
RIPscrip Command-Line Interface
===============================

- **ripview**: Decode RIPscrip scenes and render them to PNG, from a
  captured file or live from a serial line.

The tool is a Click-based CLI application with consistent error
reporting and exit codes (see errors.py).
"""

__all__ = ["ripview"]

"""
RIPscrip Session
================

Glues a StreamDecoder to an Interpreter: bytes in, canvas calls out.

Errors are isolated per unit. A batch that fails to decode is dropped
and recorded; the batches around it still reach the interpreter. A
command the interpreter rejects is skipped and recorded; the rest of its
batch still runs.

Example:
    canvas = ImageCanvas()
    session = Session(canvas)
    for chunk in iter_file_chunks("scene.rip"):
        session.feed(chunk)
    session.finish()
    canvas.save("scene.png")
"""

import logging
from typing import Iterable, Optional, Union

from ripscrip.display.canvas import Canvas
from ripscrip.display.interpreter import Interpreter
from ripscrip.display.state import DisplayState
from ripscrip.errors import DecodeError, ErrorCollector
from ripscrip.protocol.decoder import DEFAULT_ENCODING, StreamDecoder

logger = logging.getLogger(__name__)


class Session:
    """
    One display session: a decoder and an interpreter sharing a stream.

    Attributes:
        decoder: Stream decoder holding undecoded input
        interpreter: Interpreter owning the Display State
        decode_errors: Batches dropped because they failed to decode

    Pass either a canvas, for a fresh Interpreter drawing on it, or an
    existing interpreter, which keeps its own canvas and state.
    """

    def __init__(self, canvas: Optional[Canvas] = None, encoding: str = DEFAULT_ENCODING,
                 interpreter: Optional[Interpreter] = None, max_errors: int = 100):
        if (canvas is None) == (interpreter is None):
            raise ValueError("Session needs exactly one of canvas or interpreter")
        self.decoder = StreamDecoder(encoding)
        self.interpreter = interpreter if interpreter is not None else Interpreter(canvas)
        self.decode_errors = ErrorCollector(max_errors)

    @property
    def state(self) -> DisplayState:
        return self.interpreter.state

    @property
    def render_errors(self) -> ErrorCollector:
        return self.interpreter.errors

    def has_errors(self) -> bool:
        return self.decode_errors.has_errors() or self.render_errors.has_errors()

    def error_count(self) -> int:
        return self.decode_errors.error_count() + self.render_errors.error_count()

    def feed(self, chunk: Union[bytes, str]) -> int:
        """
        Process one chunk of the stream.

        Returns:
            Number of commands applied.
        """
        self.decoder.push(chunk)
        return self._drain()

    def finish(self) -> int:
        """Process whatever input is left, treating end of input as final."""
        self.decoder.close()
        applied = self._drain()
        self.decoder.finish()
        return applied

    def run(self, chunks: Iterable[Union[bytes, str]]) -> int:
        """Feed every chunk, then finish. Returns commands applied."""
        applied = 0
        for chunk in chunks:
            applied += self.feed(chunk)
        applied += self.finish()
        return applied

    def report(self) -> str:
        """Combined error report for decode and render errors."""
        sections = []
        if self.decode_errors.has_errors():
            sections.append("Decode errors:\n" + self.decode_errors.report())
        if self.render_errors.has_errors():
            sections.append("Render errors:\n" + self.render_errors.report())
        return "\n\n".join(sections)

    def _drain(self) -> int:
        applied = 0
        while True:
            try:
                batch = self.decoder.next_batch()
            except DecodeError as e:
                # next_batch() has already logged and skipped the batch.
                self.decode_errors.add(e)
                continue
            if batch is None:
                return applied
            applied += self.interpreter.run(batch)

"""Read a file's lines last-to-first without loading the whole file.

The file is read in fixed-size chunks starting at end-of-file. Bytes that
belong to a line split across a chunk boundary are carried into the next
(earlier) chunk, so each yielded line is complete. Lines keep their ``\\n``
terminator; only a final unterminated line lacks one.
"""

import os
from typing import Generator

DEFAULT_CHUNK_SIZE = 8192


def _decode(raw: bytes, encoding: str) -> str:
    return raw.decode(encoding, errors="replace")


def reverse_lines(
    path: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    encoding: str = "utf-8",
) -> Generator[str, None, None]:
    """Yield the lines of *path* from the last one to the first.

    Raises FileNotFoundError when the file does not exist. The file handle is
    closed when the generator is exhausted or closed early.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    with open(path, "rb") as f:
        position = f.seek(0, os.SEEK_END)
        carry = b""

        while position > 0:
            size = min(chunk_size, position)
            position -= size
            f.seek(position)
            # Always ends at a line end or at EOF.
            chunk = f.read(size) + carry

            pieces = chunk.split(b"\n")
            if len(pieces) == 1:
                carry = chunk
                continue

            if pieces[-1]:
                yield _decode(pieces[-1], encoding)
            for piece in reversed(pieces[1:-1]):
                yield _decode(piece + b"\n", encoding)

            # The first piece may start in an earlier chunk.
            carry = pieces[0] + b"\n"

        if carry:
            yield _decode(carry, encoding)


class CountingLines:
    """Wrap a line iterator and count how many lines were pulled from it."""

    def __init__(self, lines):
        self._lines = iter(lines)
        self.count = 0

    def __iter__(self):
        return self

    def __next__(self) -> str:
        line = next(self._lines)
        self.count += 1
        return line

    def close(self) -> None:
        close = getattr(self._lines, "close", None)
        if close is not None:
            close()

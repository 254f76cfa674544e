# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Compression utilities for tabpivot input and output files.

Input files may be plain text or Zstd-compressed; the format is
detected from the magic number, never from the extension.
"""

import io
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, TextIO, Union

import zstandard as zstd

# Zstd magic number (little-endian): 0xFD2FB528
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

# Bytes that are not valid UTF-8 decode to lone surrogates and encode
# back to the same bytes.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"

# Only "\n" ends a record; a "\r" inside a field is data.
RECORD_TERMINATOR = "\n"


def detect_compression(filepath: Union[str, Path]) -> str:
    """
    Detect compression format of a file.

    Args:
        filepath: Path to the file to check

    Returns:
        Compression type: "zstd" or "none"

    Raises:
        FileNotFoundError: If file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "rb") as f:
        magic = f.read(4)
        if magic == ZSTD_MAGIC:
            return "zstd"

    return "none"


@contextmanager
def open_text_file(filepath: Union[str, Path]) -> Iterator[TextIO]:
    """
    Open an input file for reading text, handling compression.

    Lines end at "\\n" only and are passed through untranslated. Bytes
    that are not valid UTF-8 survive as lone surrogates.

    Args:
        filepath: Path to the input file

    Yields:
        Text stream for reading the file contents

    Raises:
        FileNotFoundError: If file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    if detect_compression(filepath) == "zstd":
        # stream_reader handles multiple concatenated frames
        dctx = zstd.ZstdDecompressor()
        with open(filepath, "rb") as binary_file:
            with dctx.stream_reader(binary_file, read_across_frames=True) as reader:
                with io.TextIOWrapper(
                    reader,
                    encoding=ENCODING,
                    errors=ENCODING_ERRORS,
                    newline=RECORD_TERMINATOR,
                ) as stream:
                    yield stream
    else:
        with open(
            filepath,
            "r",
            encoding=ENCODING,
            errors=ENCODING_ERRORS,
            newline=RECORD_TERMINATOR,
        ) as f:
            yield f


def encode_text(text: str) -> bytes:
    """Encode text, restoring any undecodable input bytes."""
    return text.encode(ENCODING, ENCODING_ERRORS)


def compress_text(text: str) -> bytes:
    """Compress text as a single Zstd frame."""
    cctx = zstd.ZstdCompressor()
    return cctx.compress(encode_text(text))

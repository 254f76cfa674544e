# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Record readers for tab-delimited input.

A record is one line; fields are separated by a single tab with no
quoting or escaping. Trailing empty fields are kept.
"""

import io
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO, Union

from tabpivot.compression import (
    detect_compression,
    ENCODING,
    ENCODING_ERRORS,
    open_text_file,
    RECORD_TERMINATOR,
)
from tabpivot.log import get_logger

logger = get_logger(__name__)

FIELD_SEPARATOR = "\t"
STDIN_NAME = "-"


def split_record(line: str) -> list[str]:
    """
    Split one input line into fields.

    Only the line terminator is removed, so "a\\tb\\t\\n" yields
    ["a", "b", ""].
    """
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line.split(FIELD_SEPARATOR)


def get_field(record: list[str], index: int) -> str:
    """Return the 0-based field of a record, or "" when the record is short."""
    if index < len(record):
        return record[index]
    return ""


class RecordReaderBase(ABC):
    """
    Source of tab-delimited records.

    Example:
        >>> reader = RecordReader("sales.tsv")
        >>> for record in reader.iter_records():
        ...     print(record[0])
    """

    name: str

    @abstractmethod
    def iter_records(self) -> Iterator[list[str]]:
        pass


class RecordReader(RecordReaderBase):
    """
    Reader for tab-delimited files.

    Supports plain text and Zstd-compressed files.
    """

    def __init__(self, file_path: Union[str, Path]) -> None:
        """
        Initialize the RecordReader.

        Args:
            file_path: Path to the input file (plain or .zst)

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise FileNotFoundError(f"File not found: {self.file_path}")

        self.name = str(self.file_path)
        self.compression = detect_compression(self.file_path)

    def iter_records(self) -> Iterator[list[str]]:
        """
        Iterate over all records in the file.

        Yields:
            list[str]: The fields of each line
        """
        logger.debug("Reading %s (compression: %s)", self.name, self.compression)
        with open_text_file(self.file_path) as f:
            for line in f:
                yield split_record(line)


class StreamRecordReader(RecordReaderBase):
    """Reader for an already open text stream, such as stdin."""

    def __init__(self, stream: Optional[TextIO] = None, name: str = "<stdin>") -> None:
        self.stream = stream
        self.name = name

    def iter_records(self) -> Iterator[list[str]]:
        logger.debug("Reading %s", self.name)
        if self.stream is not None:
            for line in self.stream:
                yield split_record(line)
            return

        # Re-decode stdin's bytes the way input files are decoded
        stream = io.TextIOWrapper(
            sys.stdin.buffer,
            encoding=ENCODING,
            errors=ENCODING_ERRORS,
            newline=RECORD_TERMINATOR,
        )
        try:
            for line in stream:
                yield split_record(line)
        finally:
            stream.detach()


def open_readers(paths: Iterable[Union[str, Path]]) -> list[RecordReaderBase]:
    """
    Create one reader per input path; "-" or no paths at all means stdin.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    readers: list[RecordReaderBase] = []
    for path in paths:
        if str(path) == STDIN_NAME:
            readers.append(StreamRecordReader())
        else:
            readers.append(RecordReader(path))
    if not readers:
        readers.append(StreamRecordReader())
    return readers


def iter_all_records(readers: Iterable[RecordReaderBase]) -> Iterator[list[str]]:
    """Chain the records of several readers into one stream."""
    for reader in readers:
        yield from reader.iter_records()

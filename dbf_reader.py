"""
Sequential DBF reader.
"""

import contextlib
import logging
import os
from typing import Any, BinaryIO, Iterator, List, Optional, Tuple, Union

from dbf_errors import DBFError, DBFStateError
from dbf_field import DBFField
from dbf_header import DBF_END_OF_DATA, DBFHeader, read_dbf_header
from dbf_record import decode_record


logger = logging.getLogger(__name__)


class DBFReader:
    """
    Reads the records of a DBF file in order.

    Example:
        with DBFReader("people.dbf") as reader:
            for name, age in reader:
                ...
    """

    def __init__(self, source: Union[str, os.PathLike, BinaryIO],
                 charset: Optional[str] = None, skip_deleted: bool = True):
        """
        Open a DBF file and read its header.

        Args:
            source: Path, or a binary stream positioned at the start of the file
                (the caller keeps ownership of a stream)
            charset: Overrides the charset named by the language driver byte
            skip_deleted: Skip records flagged as deleted
        """
        self.skip_deleted = skip_deleted
        self._resources = contextlib.ExitStack()
        self._closed = False
        try:
            if isinstance(source, (str, os.PathLike)):
                self._file = self._resources.enter_context(open(source, "rb"))
            else:
                self._file = source
            self._start = self._file.tell()
            self.header: DBFHeader = read_dbf_header(self._file, charset)
        except OSError as e:
            self._resources.close()
            raise DBFError(f"Error opening DBF file: {e}", e) from e
        except DBFError:
            self._resources.close()
            raise
        self._next_row = 0
        self.seek_to_record(0)

    @property
    def fields(self) -> List[DBFField]:
        return self.header.fields

    @property
    def field_names(self) -> List[str]:
        return [field.name for field in self.header.fields]

    @property
    def charset(self) -> str:
        return self.header.charset

    @property
    def record_count(self) -> int:
        return self.header.record_count

    def seek_to_record(self, row_index: int) -> None:
        """
        Move to a record.

        Args:
            row_index: Zero-based record index
        """
        self._check_open()
        # Calculate position: header + (row_index * record_size)
        position = self._start + self.header.header_size + (row_index * self.header.record_size)
        try:
            self._file.seek(position)
        except OSError as e:
            raise DBFError(f"Error seeking to record {row_index}: {e}", e) from e
        self._next_row = row_index

    def read_record_raw(self) -> Optional[Tuple[bool, List[Any]]]:
        """
        Read the next record whether or not it is deleted.

        Returns:
            Tuple of (deleted, values), or None past the last record
        """
        self._check_open()
        if self._next_row >= self.header.record_count:
            return None
        try:
            row_data = self._file.read(self.header.record_size)
        except OSError as e:
            raise DBFError(f"Error reading record {self._next_row}: {e}", e) from e

        if len(row_data) < self.header.record_size or row_data[0] == DBF_END_OF_DATA:
            logger.debug("data ends at record %d of %d", self._next_row, self.header.record_count)
            self._next_row = self.header.record_count
            return None

        self._next_row += 1
        return decode_record(self.header.fields, row_data, self.header.charset)

    def read_record(self) -> Optional[List[Any]]:
        """Read the next record, or None past the last record."""
        while True:
            result = self.read_record_raw()
            if result is None:
                return None
            deleted, values = result
            if not (deleted and self.skip_deleted):
                return values

    def __iter__(self) -> Iterator[List[Any]]:
        while True:
            values = self.read_record()
            if values is None:
                return
            yield values

    def _check_open(self) -> None:
        if self._closed:
            raise DBFStateError("The DBFReader is closed")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._resources.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


__all__ = ['DBFReader']

"""
DBF writers.

Two variants share one interface:

- DBFStreamWriter keeps encoded records in memory and writes the whole
  file to its output stream on close().
- DBFFileWriter works on a random access file: records are appended as
  they are added and the header is patched with the final record count
  on close(). It can also append to an existing DBF file.

Example:
    with open_writer("people.dbf") as writer:
        writer.define_layout([
            DBFField("NAME", "C", 10),
            DBFField("AGE", "N", 3),
        ])
        writer.add_record(["Ann", 30])
"""

import contextlib
import io
import logging
import os
import warnings
from typing import Any, BinaryIO, List, Optional, Sequence, Union

from dbf_charset import DBF_DEFAULT_CHARSET, normalize_charset, resolve_write_charset
from dbf_errors import DBFError, DBFLayoutError, DBFStateError
from dbf_field import DBFField, validate_fields
from dbf_header import (
    DBF_END_OF_DATA, DBFHeader, init_dbf_header, read_dbf_header,
    stamp_dbf_header, write_dbf_header,
)
from dbf_record import check_record, encode_record


logger = logging.getLogger(__name__)

PathType = Union[str, os.PathLike]


class DBFWriter:
    """Common part of the writers: layout definition and record validation."""

    def __init__(self, charset: Optional[str] = None):
        self.header = DBFHeader()
        self.header.charset = normalize_charset(charset or DBF_DEFAULT_CHARSET)
        self._charset_explicit = charset is not None
        self._record_count = 0
        self._closed = False
        self._resources = contextlib.ExitStack()

    @property
    def charset(self) -> str:
        return self.header.charset

    @property
    def fields(self) -> List[DBFField]:
        return list(self.header.fields)

    @property
    def record_count(self) -> int:
        return self._record_count

    @property
    def closed(self) -> bool:
        return self._closed

    def define_layout(self, fields: Sequence[Optional[DBFField]]) -> None:
        """
        Set the fields of the file. Can only be done once.

        Args:
            fields: Field descriptors in record order, at most 255
        """
        if self._closed:
            raise DBFStateError("You can not set fields to a closed DBFWriter")
        if self.header.fields:
            raise DBFLayoutError("Fields has already been set")

        charset, language_driver = resolve_write_charset(self.header.charset)
        committed = validate_fields(fields, charset)

        self.header.charset = charset
        self.header.language_driver = language_driver
        self.header.fields = committed
        init_dbf_header(self.header)
        logger.debug("layout committed: %s", ', '.join(f"{f.name} {f.spec}" for f in committed))

    set_fields = define_layout

    def add_record(self, values: Sequence[Any]) -> None:
        """
        Add a record.

        Args:
            values: One value per field, None for a blank field
        """
        if self._closed:
            raise DBFStateError("You can not add records to a closed DBFWriter")
        if not self.header.fields:
            raise DBFStateError("Fields should be set before adding records")

        check_record(self.header.fields, values)
        data = encode_record(self.header.fields, values, self.header.charset, self.header.record_size)
        self._store_record(data)
        self._record_count += 1

    def _store_record(self, data: bytes) -> None:
        raise NotImplementedError

    def _finish(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Finish the file and release the output. Closing twice does nothing."""
        if self._closed:
            return
        self._closed = True
        with self._resources:
            if not self.header.fields:
                logger.warning("closing %s without a field layout, nothing written",
                               self.__class__.__name__)
                return
            self._finish()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class DBFStreamWriter(DBFWriter):
    """
    Writer that buffers records and writes the file to a stream on close().

    Without a stream the file is built in memory and returned by getvalue().
    """

    def __init__(self, stream: Optional[BinaryIO] = None, charset: Optional[str] = None):
        super().__init__(charset)
        self._records: List[bytes] = []
        self._data: Optional[bytes] = None
        if stream is None:
            self._buffer = io.BytesIO()
            self._stream = self._buffer
        else:
            self._buffer = None
            self._stream = stream
            self._resources.callback(stream.close)

    def _store_record(self, data: bytes) -> None:
        self._records.append(data)

    def _write_to_stream(self, out: BinaryIO) -> None:
        self.header.record_count = len(self._records)
        stamp_dbf_header(self.header)
        try:
            write_dbf_header(out, self.header)
            for record in self._records:
                out.write(record)
            out.write(bytes([DBF_END_OF_DATA]))
            out.flush()
        except OSError as e:
            raise DBFError(f"Error writing DBF data: {e}", e) from e

    def _finish(self) -> None:
        self._write_to_stream(self._stream)
        if self._buffer is not None:
            self._data = self._buffer.getvalue()
        logger.debug("wrote %d records to stream", len(self._records))

    def getvalue(self) -> bytes:
        """Bytes of the finished file, for a writer built without a stream."""
        if self._buffer is None:
            raise DBFStateError("This writer writes to a caller supplied stream")
        if not self._closed:
            raise DBFStateError("The file is only complete after close()")
        return self._data or b''

    def write(self, out: BinaryIO) -> None:
        """Write the buffered file to another stream without closing the writer."""
        warnings.warn("DBFStreamWriter.write() is deprecated, pass the stream "
                      "to the constructor and call close()", DeprecationWarning, stacklevel=2)
        if not self.header.fields:
            raise DBFStateError("Fields should be set before writing")
        self._write_to_stream(out)


class DBFFileWriter(DBFWriter):
    """
    Writer backed by a random access file.

    An empty or missing file gets a new layout; a non-empty file must be a
    DBF file and new records are appended after its existing ones.
    """

    def __init__(self, target: Union[PathType, BinaryIO], charset: Optional[str] = None):
        super().__init__(charset)
        try:
            if isinstance(target, (str, os.PathLike)):
                mode = "r+b" if os.path.exists(target) else "w+b"
                logger.debug("opening %s in %s mode", target, mode)
                self._file = self._resources.enter_context(open(target, mode))
            else:
                self._file = target
                self._resources.callback(target.close)

            self._file.seek(0, os.SEEK_END)
            file_size = self._file.tell()
            if file_size > 0:
                self._open_existing(file_size, charset)
        except FileNotFoundError as e:
            self._resources.close()
            raise DBFError(f"Specified file is not found. {e}", e) from e
        except OSError as e:
            self._resources.close()
            raise DBFError(f"{e} while reading header", e) from e
        except DBFError:
            self._resources.close()
            raise

    def _open_existing(self, file_size: int, charset: Optional[str]) -> None:
        self._file.seek(0)
        self.header = read_dbf_header(self._file, charset)
        if not self.header.fields:
            raise DBFError("Existing file has no field descriptors")
        self._record_count = self.header.record_count

        # Overwrite the end of data marker with the next record
        self._file.seek(file_size - 1)
        last_byte = self._file.read(1)
        if file_size > self.header.header_size and last_byte == bytes([DBF_END_OF_DATA]):
            self._file.seek(file_size - 1)
        else:
            if file_size > self.header.header_size:
                logger.warning("no end of data marker, appending at end of file")
            self._file.seek(file_size)
        logger.debug("appending to file with %d records at offset %d",
                     self._record_count, self._file.tell())

    def define_layout(self, fields: Sequence[Optional[DBFField]]) -> None:
        if self._closed:
            raise DBFStateError("You can not set fields to a closed DBFWriter")
        if self.header.fields:
            raise DBFLayoutError("You can not change fields on an existing file")
        super().define_layout(fields)

        # New file: the provisional header goes first
        try:
            self._file.seek(0)
            stamp_dbf_header(self.header)
            write_dbf_header(self._file, self.header)
        except OSError as e:
            raise DBFError(f"Error accessing file: {e}", e) from e

    set_fields = define_layout

    def _store_record(self, data: bytes) -> None:
        try:
            self._file.write(data)
        except OSError as e:
            raise DBFError(f"Error occurred while writing record. {e}", e) from e

    def write_bytes(self, data: bytes) -> None:
        """Append an already encoded record and count it."""
        if self._closed:
            raise DBFStateError("You can not add records to a closed DBFWriter")
        if not self.header.fields:
            raise DBFStateError("Fields should be set before adding records")
        self._store_record(data)
        self._record_count += 1

    def _finish(self) -> None:
        # Records are already on disk, only the count and the marker are left
        self.header.record_count = self._record_count
        stamp_dbf_header(self.header)
        try:
            self._file.seek(0)
            write_dbf_header(self._file, self.header)
            self._file.seek(0, os.SEEK_END)
            self._file.write(bytes([DBF_END_OF_DATA]))
            self._file.flush()
        except OSError as e:
            raise DBFError(str(e), e) from e
        logger.debug("closed file with %d records", self._record_count)

    def write(self) -> None:
        """Finish the file; same as close()."""
        warnings.warn("DBFFileWriter.write() is deprecated, use close()",
                      DeprecationWarning, stacklevel=2)
        self.close()


def _is_random_access(stream: Any) -> bool:
    try:
        return stream.seekable() and stream.readable()
    except (AttributeError, ValueError):
        return False


def open_writer(target: Union[None, PathType, BinaryIO] = None,
                charset: Optional[str] = None) -> DBFWriter:
    """
    Create the writer variant that fits the target.

    Args:
        target: None for an in-memory file, a path or a seekable read/write
            file for direct writing, any other binary stream for buffered output
        charset: Charset of field names and character data

    Returns:
        A DBFStreamWriter or a DBFFileWriter
    """
    if target is None:
        return DBFStreamWriter(charset=charset)
    if isinstance(target, (str, os.PathLike)) or _is_random_access(target):
        return DBFFileWriter(target, charset=charset)
    return DBFStreamWriter(target, charset=charset)


__all__ = ['DBFWriter', 'DBFStreamWriter', 'DBFFileWriter', 'open_writer']

"""
DBF file header: the fixed 32-byte block, the field descriptor table and
its 0x0D terminator.
"""

import datetime
import logging
import struct
from dataclasses import dataclass, field as dataclass_field
from typing import BinaryIO, List, Optional

from dbf_charset import DBF_DEFAULT_CHARSET, resolve_read_charset
from dbf_errors import DBFError
from dbf_field import DBF_MAX_FIELDS, DBFField, assign_offsets


logger = logging.getLogger(__name__)

# Constants
DBF_HEADER_SIZE = 32
DBF_FIELD_DESCRIPTOR_SIZE = 32
DBF_HEADER_TERMINATOR = 0x0D
DBF_END_OF_DATA = 0x1A
DBF_VERSION_DBASE3 = 0x03
DBF_RECORD_ACTIVE = b' '
DBF_RECORD_DELETED = b'*'


@dataclass
class DBFHeader:
    """Represents the header of a DBF file."""
    version: int = DBF_VERSION_DBASE3  # dBase version, 0x03 for dBase III
    year: int = 0  # Last update year (since 1900)
    month: int = 0  # Last update month
    day: int = 0  # Last update day
    record_count: int = 0  # Number of records
    header_size: int = 0  # Header size in bytes
    record_size: int = 0  # Record size in bytes
    table_flags: int = 0  # dBase IV table flags (MDX present)
    language_driver: int = 0  # dBase IV language driver id
    fields: List[DBFField] = dataclass_field(default_factory=list)
    charset: str = DBF_DEFAULT_CHARSET  # Codec for names and character data

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def last_update(self) -> Optional[datetime.date]:
        if not self.month or not self.day:
            return None
        try:
            return datetime.date(1900 + self.year, self.month, self.day)
        except ValueError:
            return None


def init_dbf_header(header: DBFHeader) -> None:
    """Recompute field offsets, record size and header size from the field list."""
    header.record_size = assign_offsets(header.fields)
    header.header_size = DBF_HEADER_SIZE + (header.field_count * DBF_FIELD_DESCRIPTOR_SIZE) + 1


def stamp_dbf_header(header: DBFHeader, today: Optional[datetime.date] = None) -> None:
    """Set the last update date (year stored as an offset from 1900)."""
    today = today or datetime.date.today()
    header.year = (today.year - 1900) & 0xFF
    header.month = today.month
    header.day = today.day


def pack_dbf_header(header: DBFHeader) -> bytes:
    """
    Serialize the header, the field descriptors and the terminator.

    The stored header_size and record_size are written as they are;
    call init_dbf_header() first for a newly defined layout.
    """
    # Main file header (32 bytes)
    buf = bytearray(DBF_HEADER_SIZE)
    buf[0] = header.version
    buf[1] = header.year
    buf[2] = header.month
    buf[3] = header.day
    buf[4:8] = struct.pack("<L", header.record_count)
    buf[8:10] = struct.pack("<H", header.header_size)
    buf[10:12] = struct.pack("<H", header.record_size)
    buf[28] = header.table_flags
    buf[29] = header.language_driver
    out = bytearray(buf)

    # Field descriptors (32 bytes each)
    for field in header.fields:
        buf = bytearray(DBF_FIELD_DESCRIPTOR_SIZE)
        field_name_bytes = field.name.encode(header.charset, errors='replace')
        # name is null padded to 11 bytes, the last one always 0
        buf[:min(len(field_name_bytes), 10)] = field_name_bytes[:10]
        buf[11] = ord(field.field_type.code)
        buf[16] = field.length
        buf[17] = field.decimals
        out += buf

    # Field descriptor terminator (0x0D)
    out.append(DBF_HEADER_TERMINATOR)
    return bytes(out)


def write_dbf_header(file: BinaryIO, header: DBFHeader) -> None:
    """Write the DBF header at the current position of a file."""
    data = pack_dbf_header(header)
    logger.debug("writing header: %d fields, %d records, header %d bytes, record %d bytes",
                 header.field_count, header.record_count, header.header_size, header.record_size)
    file.write(data)


def read_dbf_header(file: BinaryIO, charset: Optional[str] = None) -> DBFHeader:
    """
    Read a DBF header from the current position of a file.

    Args:
        file: Binary stream positioned at the start of the header
        charset: Overrides the charset named by the language driver byte

    Returns:
        The parsed header, with field offsets computed
    """
    header = DBFHeader()

    # Read main file header (32 bytes)
    buf = file.read(DBF_HEADER_SIZE)
    if len(buf) < DBF_HEADER_SIZE:
        raise DBFError(f"Not a DBF file: header is {len(buf)} bytes long")
    header.version = buf[0]
    header.year = buf[1]
    header.month = buf[2]
    header.day = buf[3]
    header.record_count = struct.unpack("<L", buf[4:8])[0]
    header.header_size = struct.unpack("<H", buf[8:10])[0]
    header.record_size = struct.unpack("<H", buf[10:12])[0]
    header.table_flags = buf[28]
    header.language_driver = buf[29]
    header.charset = resolve_read_charset(header.language_driver, charset)

    # Descriptors run until 0x0D or the header size boundary
    max_fields = DBF_MAX_FIELDS
    if header.header_size > DBF_HEADER_SIZE:
        max_fields = min(max_fields, (header.header_size - DBF_HEADER_SIZE) // DBF_FIELD_DESCRIPTOR_SIZE)

    fields = []
    while len(fields) < max_fields:
        field_buf = file.read(DBF_FIELD_DESCRIPTOR_SIZE)
        if not field_buf or field_buf[0] == DBF_HEADER_TERMINATOR:
            break
        if len(field_buf) < DBF_FIELD_DESCRIPTOR_SIZE:
            raise DBFError("Truncated field descriptor table")

        # Extract field name (up to 11 bytes, null-terminated)
        raw_name = field_buf[:11].split(b'\x00', 1)[0]
        fields.append(DBFField(
            name=raw_name.decode(header.charset, errors='replace').strip(),
            field_type=chr(field_buf[11]),
            length=field_buf[16],
            decimals=field_buf[17],
        ))

    header.fields = fields
    computed_size = assign_offsets(header.fields)
    if header.record_size < computed_size:
        logger.debug("record size %d on disk is smaller than the fields need, using %d",
                     header.record_size, computed_size)
        header.record_size = computed_size

    logger.debug("read header: version 0x%02X, %d fields, %d records, charset %s",
                 header.version, header.field_count, header.record_count, header.charset)
    return header


__all__ = [
    'DBF_HEADER_SIZE', 'DBF_FIELD_DESCRIPTOR_SIZE', 'DBF_HEADER_TERMINATOR',
    'DBF_END_OF_DATA', 'DBF_VERSION_DBASE3', 'DBF_RECORD_ACTIVE', 'DBF_RECORD_DELETED',
    'DBFHeader', 'init_dbf_header', 'stamp_dbf_header',
    'pack_dbf_header', 'write_dbf_header', 'read_dbf_header',
]

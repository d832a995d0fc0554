"""
Record encoding and decoding.

A record is the deletion flag byte followed by one fixed-width slot per
field. Each field type has its own text (or binary, for the read-only
types) representation inside its slot.
"""

import datetime
import decimal
import math
import numbers
import struct
from typing import Any, List, Optional, Sequence, Tuple

from dbf_errors import DBFError, DBFRecordError
from dbf_field import DBF_MAX_DECIMALS, DBFDataType, DBFField
from dbf_header import DBF_RECORD_ACTIVE, DBF_RECORD_DELETED


ALIGN_LEFT = 'left'
ALIGN_RIGHT = 'right'

DATE_NULL = b'        '
LOGICAL_NULL = b'?'
LOGICAL_TRUE = 'TtYy'
LOGICAL_FALSE = 'FfNn'

# Julian day number of 1970-01-01, used by '@' timestamps
_JULIAN_EPOCH = 2440588
_MEMO_TYPES = (DBFDataType.MEMO, DBFDataType.BINARY, DBFDataType.GENERAL_OLE, DBFDataType.PICTURE)


def text_padding(text: str, charset: str, length: int,
                 align: str = ALIGN_LEFT, pad: bytes = b' ') -> bytes:
    """
    Encode text and pad it to exactly length bytes.

    Characters are dropped from the end until the encoded text fits, so a
    multi-byte character is never split.
    """
    data = text.encode(charset, errors='replace')
    while len(data) > length:
        text = text[:-1]
        data = text.encode(charset, errors='replace')
    if align == ALIGN_RIGHT:
        return data.rjust(length, pad)
    return data.ljust(length, pad)


def is_numeric_value(value: Any) -> bool:
    """True for numbers a N/F field can hold. bool does not count as a number."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (numbers.Real, decimal.Decimal))


def format_numeric(value: Any, decimals: int) -> str:
    """
    Format a number as fixed-point text with exactly `decimals` fraction digits.

    Rounding is half-even on the exact binary value of a float, so 2.675
    gives '2.67'. At least one integer digit is kept ('0.50').
    """
    if isinstance(value, decimal.Decimal):
        number = value
    elif isinstance(value, numbers.Integral):
        number = decimal.Decimal(int(value))
    else:
        number = decimal.Decimal(float(value))
    if not number.is_finite():
        raise ValueError(f"{value} is not a finite number")

    quantum = decimal.Decimal(1).scaleb(-decimals)
    try:
        with decimal.localcontext() as ctx:
            # Room for the widest field, the default 28 digits is not enough
            ctx.prec = DBF_MAX_DECIMALS + 64
            number = number.quantize(quantum, rounding=decimal.ROUND_HALF_EVEN)
    except decimal.InvalidOperation as e:
        raise ValueError(f"{value} cannot be represented with {decimals} decimals") from e
    if number.is_zero():
        number = abs(number)
    return f"{number:f}"


def format_date(value: datetime.date) -> str:
    """Render a date as YYYYMMDD."""
    return f"{value.year:04d}{value.month:02d}{value.day:02d}"


def parse_bool(text: str) -> Optional[bool]:
    """Parse a logical field; anything but T/Y/F/N (either case) is null."""
    text = text.strip()
    if not text:
        return None
    if text[0] in LOGICAL_TRUE:
        return True
    if text[0] in LOGICAL_FALSE:
        return False
    return None


def parse_numeric(text: str, decimals: int) -> Optional[Any]:
    """Parse a N/F field: int when there are no decimals, float otherwise."""
    text = text.strip()
    if not text or '?' in text:
        return None
    try:
        if decimals == 0 and '.' not in text and 'e' not in text.lower():
            return int(text)
        return float(text)
    except ValueError as e:
        raise DBFError(f"Failed to parse number {text!r}", e) from e


def parse_date(text: str) -> Optional[datetime.date]:
    """Parse a YYYYMMDD date; blank or all-zero dates are null."""
    text = text.strip()
    if not text or text.strip('0') == '':
        return None
    if len(text) != 8 or not text.isdigit():
        raise DBFError(f"Invalid date {text!r}")
    try:
        return datetime.date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError as e:
        raise DBFError(f"Invalid date {text!r}", e) from e


def check_value(field: DBFField, index: int, value: Any) -> None:
    """Check that a value has the type its field requires."""
    if value is None:
        return

    ftype = field.field_type
    if ftype is DBFDataType.CHARACTER:
        valid = isinstance(value, str)
    elif ftype is DBFDataType.LOGICAL:
        valid = isinstance(value, bool)
    elif ftype is DBFDataType.DATE:
        valid = isinstance(value, datetime.date)
    elif ftype.has_decimals:
        valid = is_numeric_value(value)
        if valid:
            try:
                text = format_numeric(value, field.decimals)
            except ValueError as e:
                raise DBFRecordError(
                    f"Invalid value for field {index}: {value}", index, value) from e
            if len(text) > field.length:
                raise DBFRecordError(
                    f"Value {value} does not fit field {index} ({field.spec})", index, value)
    else:
        raise DBFRecordError(
            f"Unsupported writing of field type {index} {ftype.name}", index, value)

    if not valid:
        raise DBFRecordError(f"Invalid value for field {index}: {value!r}", index, value)


def check_record(fields: Sequence[DBFField], values: Optional[Sequence[Any]]) -> None:
    """
    Validate a whole record before any byte of it is produced.

    Args:
        fields: Committed field layout
        values: One value (or None) per field
    """
    if values is None:
        raise DBFRecordError("Null cannot be added as row")
    if len(values) != len(fields):
        raise DBFRecordError(
            f"Invalid record. Invalid number of fields in row: "
            f"expected {len(fields)}, got {len(values)}")
    for index, (field, value) in enumerate(zip(fields, values)):
        check_value(field, index, value)


def encode_value(field: DBFField, value: Any, charset: str) -> bytes:
    """Encode a single value into its field's slot."""
    ftype = field.field_type
    if ftype is DBFDataType.CHARACTER:
        text = '' if value is None else str(value)
        return text_padding(text, charset, field.length, ALIGN_LEFT)

    if ftype.has_decimals:
        if value is None:
            return text_padding(' ', charset, field.length, ALIGN_RIGHT)
        text = format_numeric(value, field.decimals)
        if len(text) > field.length:
            raise DBFRecordError(f"Value {value} does not fit field {field.name}", value=value)
        return text_padding(text, charset, field.length, ALIGN_RIGHT)

    if ftype is DBFDataType.DATE:
        if value is None:
            return DATE_NULL
        return format_date(value).encode('ascii')

    if ftype is DBFDataType.LOGICAL:
        if isinstance(value, bool):
            return b'T' if value else b'F'
        return LOGICAL_NULL

    raise DBFRecordError(f"Unknown field type {ftype.name}")


def encode_record(fields: Sequence[DBFField], values: Sequence[Any], charset: str,
                  record_size: Optional[int] = None) -> bytes:
    """
    Build the bytes of one record, deletion flag first.

    Args:
        fields: Committed field layout
        values: Values already accepted by check_record()
        charset: Charset for character data
        record_size: On-disk record size; slack after the last field is spaces

    Returns:
        The record bytes
    """
    # Build the row buffer, first byte is the delete flag
    row_buffer = bytearray(DBF_RECORD_ACTIVE)
    for field, value in zip(fields, values):
        row_buffer += encode_value(field, value, charset)

    if record_size is not None and len(row_buffer) < record_size:
        row_buffer += b' ' * (record_size - len(row_buffer))
    return bytes(row_buffer)


def _decode_timestamp(raw: bytes) -> Optional[datetime.datetime]:
    day, millis = struct.unpack('<ll', raw[:8])
    if day == 0 and millis == 0:
        return None
    epoch = datetime.datetime(1970, 1, 1)
    return epoch + datetime.timedelta(days=day - _JULIAN_EPOCH, milliseconds=millis)


def decode_value(field: DBFField, raw: bytes, charset: str) -> Any:
    """
    Decode the bytes of one field slot.

    Args:
        field: Field descriptor the slot belongs to
        raw: Exactly field.length bytes
        charset: Charset for character data

    Returns:
        The decoded value, None for a blank slot
    """
    ftype = field.field_type

    if ftype is DBFDataType.CHARACTER:
        text = raw.decode(charset, errors='replace').rstrip(' \x00')
        return text if text else None

    if ftype.has_decimals:
        return parse_numeric(raw.decode('ascii', errors='replace'), field.decimals)

    if ftype is DBFDataType.DATE:
        return parse_date(raw.decode('ascii', errors='replace'))

    if ftype is DBFDataType.LOGICAL:
        return parse_bool(raw.decode('ascii', errors='replace'))

    if ftype in _MEMO_TYPES:
        # Block number into the memo file, as text or as a 4-byte integer
        if field.length == 4:
            block = struct.unpack('<l', raw)[0]
            return block or None
        text = raw.decode('ascii', errors='replace').strip()
        return int(text) if text.isdigit() and int(text) else None

    if ftype in (DBFDataType.LONG, DBFDataType.AUTOINCREMENT) and len(raw) == 4:
        return struct.unpack('<l', raw)[0]

    if ftype is DBFDataType.DOUBLE and len(raw) == 8:
        value = struct.unpack('<d', raw)[0]
        return None if math.isnan(value) else value

    if ftype is DBFDataType.CURRENCY and len(raw) == 8:
        return decimal.Decimal(struct.unpack('<q', raw)[0]).scaleb(-4)

    if ftype is DBFDataType.TIMESTAMP and len(raw) == 8:
        return _decode_timestamp(raw)

    return bytes(raw)


def decode_record(fields: Sequence[DBFField], raw: bytes, charset: str) -> Tuple[bool, List[Any]]:
    """
    Split a record into its values.

    Returns:
        Tuple of (deleted, values)
    """
    deleted = raw[:1] == DBF_RECORD_DELETED
    values = []
    for field in fields:
        values.append(decode_value(field, raw[field.offset:field.offset + field.length], charset))
    return deleted, values


__all__ = [
    'ALIGN_LEFT', 'ALIGN_RIGHT', 'DATE_NULL', 'LOGICAL_NULL',
    'text_padding', 'is_numeric_value', 'format_numeric', 'format_date',
    'parse_bool', 'parse_numeric', 'parse_date',
    'check_value', 'check_record', 'encode_value', 'encode_record',
    'decode_value', 'decode_record',
]

"""
Field descriptors and the DBF field type model.

A layout is a list of DBFField objects; validate_fields() turns a
caller-supplied list into the committed, offset-annotated copy that the
header and record codecs work from.
"""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from dbf_errors import DBFLayoutError


DBF_MAX_FIELDS = 255
DBF_FIELD_NAME_MAX = 10
DBF_MAX_DECIMALS = 15


class DBFDataType(Enum):
    """Field types, keyed by the type byte stored in the field descriptor."""
    CHARACTER = 'C'
    NUMERIC = 'N'
    FLOATING_POINT = 'F'
    DATE = 'D'
    LOGICAL = 'L'
    VARCHAR = 'V'
    VARBINARY = 'Q'
    MEMO = 'M'
    BINARY = 'B'
    BLOB = 'W'
    GENERAL_OLE = 'G'
    PICTURE = 'P'
    LONG = 'I'
    AUTOINCREMENT = '+'
    DOUBLE = 'O'
    TIMESTAMP = '@'
    CURRENCY = 'Y'
    NULL_FLAGS = '0'
    UNKNOWN = '\x00'

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and len(value) == 1 and value.islower():
            return cls(value.upper())
        return cls.UNKNOWN

    @property
    def code(self) -> str:
        return self.value

    @property
    def writable(self) -> bool:
        return self in _SIZES

    @property
    def min_size(self) -> int:
        return _SIZES.get(self, (1, 255, 1))[0]

    @property
    def max_size(self) -> int:
        return _SIZES.get(self, (1, 255, 1))[1]

    @property
    def default_size(self) -> int:
        return _SIZES.get(self, (1, 255, 1))[2]

    @property
    def has_decimals(self) -> bool:
        return self in (DBFDataType.NUMERIC, DBFDataType.FLOATING_POINT)


# (min, max, default) length for the types this codec can write
_SIZES = {
    DBFDataType.CHARACTER: (1, 254, 1),
    DBFDataType.NUMERIC: (1, 32, 10),
    DBFDataType.FLOATING_POINT: (1, 20, 10),
    DBFDataType.DATE: (8, 8, 8),
    DBFDataType.LOGICAL: (1, 1, 1),
}


@dataclass
class DBFField:
    """Represents a column/field in a DBF file."""
    name: str  # Field name (max 10 bytes once encoded)
    field_type: Union[DBFDataType, str]  # DBFDataType or its type letter
    length: int = 0  # Field length in bytes, 0 takes the type default on layout commit
    decimals: int = 0  # Number of decimal places (for N and F)
    offset: int = 0  # offset within record; first field starts at 1

    def __post_init__(self):
        if not isinstance(self.field_type, DBFDataType):
            self.field_type = DBFDataType(self.field_type)

    @property
    def spec(self) -> str:
        return build_field_spec(self)


def build_field_spec(field: DBFField) -> str:
    """
    Build a field specification string (e.g., 'C(30)' or 'N(10,2)').

    Args:
        field: The field column definition

    Returns:
        Field specification string
    """
    spec = f"{field.field_type.code}({field.length}"
    if field.decimals > 0:
        spec += f",{field.decimals}"
    spec += ")"
    return spec


def parse_field_spec(spec: str) -> Tuple[DBFDataType, int, int]:
    """
    Parse a field specification string.

    Args:
        spec: Field specification string (e.g., 'C(30)', 'N(10,2)' or 'D')

    Returns:
        Tuple of (field_type, length, decimals)
    """
    spec = spec.strip()
    if not spec:
        raise DBFLayoutError("Empty field specification")

    field_type = DBFDataType(spec[0].upper())
    if field_type is DBFDataType.UNKNOWN:
        raise DBFLayoutError(f"Unknown field type in {spec!r}")

    # Bare type letter takes the default size
    if len(spec) == 1:
        return (field_type, field_type.default_size, 0)

    paren_start = spec.find('(')
    paren_end = spec.find(')')
    if paren_start != 1 or paren_end <= paren_start + 1:
        raise DBFLayoutError(f"Malformed field specification {spec!r}")

    content = spec[paren_start + 1:paren_end]
    parts = content.split(',')
    try:
        length = int(parts[0].strip())
        decimals = int(parts[1].strip()) if len(parts) > 1 else 0
    except ValueError as e:
        raise DBFLayoutError(f"Malformed field specification {spec!r}") from e

    return (field_type, length, decimals)


def field_from_spec(name: str, spec: str) -> DBFField:
    """Create a field from a name and a 'T(len,dec)' specification."""
    field_type, length, decimals = parse_field_spec(spec)
    return DBFField(name=name, field_type=field_type, length=length, decimals=decimals)


def validate_field(field: DBFField, charset: str) -> None:
    """Check a writable field's name and geometry."""
    if not field.name:
        raise DBFLayoutError("Field name cannot be empty")
    encoded = field.name.encode(charset, errors='replace')
    if len(encoded) > DBF_FIELD_NAME_MAX:
        raise DBFLayoutError(
            f"Field name {field.name} is longer than {DBF_FIELD_NAME_MAX} bytes")

    ftype = field.field_type
    if not ftype.min_size <= field.length <= ftype.max_size:
        raise DBFLayoutError(
            f"Field {field.name} of type {ftype.name} must have a length between "
            f"{ftype.min_size} and {ftype.max_size} ({field.length})")

    if field.decimals < 0:
        raise DBFLayoutError(f"Field {field.name} has a negative decimal count")
    if field.decimals > 0:
        if not ftype.has_decimals:
            raise DBFLayoutError(f"Field {field.name} of type {ftype.name} cannot have decimals")
        if field.decimals > DBF_MAX_DECIMALS:
            raise DBFLayoutError(
                f"Field {field.name} has more than {DBF_MAX_DECIMALS} decimals")
        if field.length < field.decimals + 2:
            raise DBFLayoutError(
                f"Field {field.name} is too short for {field.decimals} decimals")


def assign_offsets(fields: List[DBFField]) -> int:
    """Set each field's offset and return the record size."""
    offset = 1  # First byte is delete flag
    for field in fields:
        field.offset = offset
        offset += field.length
    return offset


def validate_fields(fields: Optional[List[Optional[DBFField]]], charset: str) -> List[DBFField]:
    """
    Validate a layout for writing and return the committed copy.

    Args:
        fields: Field descriptors in record order
        charset: Charset field names will be encoded with

    Returns:
        Deep copy of the fields with default lengths and offsets assigned
    """
    if not fields:
        raise DBFLayoutError("Should have at least one field")
    if len(fields) > DBF_MAX_FIELDS:
        raise DBFLayoutError(f"Exceeded column limit of {DBF_MAX_FIELDS} ({len(fields)})")

    null_indices = [i for i, field in enumerate(fields) if field is None]
    if len(null_indices) == 1:
        raise DBFLayoutError(f"Field {null_indices[0]} is null")
    if null_indices:
        raise DBFLayoutError(f"Fields {null_indices} are null")

    for field in fields:
        if not field.field_type.writable:
            raise DBFLayoutError(
                f"Field {field.name} is of type {field.field_type.name} "
                f"that is not supported for writing")

    committed = copy.deepcopy(list(fields))
    for field in committed:
        if not field.length:
            field.length = field.field_type.default_size
        validate_field(field, charset)

    assign_offsets(committed)
    return committed


__all__ = [
    'DBF_MAX_FIELDS', 'DBF_FIELD_NAME_MAX', 'DBF_MAX_DECIMALS',
    'DBFDataType', 'DBFField',
    'build_field_spec', 'parse_field_spec', 'field_from_spec',
    'validate_field', 'validate_fields', 'assign_offsets',
]

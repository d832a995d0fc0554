"""
Reading and writing dBase (.DBF) files.

This module gathers the public API of the codec:

- field layouts: DBFField, DBFDataType
- writing: open_writer(), DBFStreamWriter, DBFFileWriter
- reading: DBFReader
- low level: header and record codecs, language driver lookup
"""

from dbf_charset import (
    DBF_DEFAULT_CHARSET, DBF_LANG_JAPAN, DBF_LANG_NONE, DBF_LANG_US,
    DBF_LANG_WESTERN_EUROPE, DBF_LANG_WINDOWS_ANSI, DBF_UNIVERSAL_CHARSET,
    charset_for_code, code_for_charset, normalize_charset,
    resolve_read_charset, resolve_write_charset,
)
from dbf_errors import (
    DBFCharsetError, DBFError, DBFLayoutError, DBFRecordError, DBFStateError,
)
from dbf_field import (
    DBF_FIELD_NAME_MAX, DBF_MAX_DECIMALS, DBF_MAX_FIELDS,
    DBFDataType, DBFField, build_field_spec, field_from_spec,
    parse_field_spec, validate_fields,
)
from dbf_header import (
    DBF_END_OF_DATA, DBF_FIELD_DESCRIPTOR_SIZE, DBF_HEADER_SIZE,
    DBF_HEADER_TERMINATOR, DBF_RECORD_ACTIVE, DBF_RECORD_DELETED,
    DBF_VERSION_DBASE3, DBFHeader, init_dbf_header, pack_dbf_header,
    read_dbf_header, stamp_dbf_header, write_dbf_header,
)
from dbf_reader import DBFReader
from dbf_record import (
    check_record, decode_record, decode_value, encode_record, encode_value,
)
from dbf_writer import DBFFileWriter, DBFStreamWriter, DBFWriter, open_writer


# Export functions
__all__ = [
    'DBFField', 'DBFDataType', 'DBFHeader',
    'DBFWriter', 'DBFStreamWriter', 'DBFFileWriter', 'DBFReader', 'open_writer',
    'DBFError', 'DBFLayoutError', 'DBFRecordError', 'DBFCharsetError', 'DBFStateError',
    'DBF_MAX_FIELDS', 'DBF_FIELD_NAME_MAX', 'DBF_MAX_DECIMALS',
    'DBF_HEADER_SIZE', 'DBF_FIELD_DESCRIPTOR_SIZE', 'DBF_HEADER_TERMINATOR',
    'DBF_END_OF_DATA', 'DBF_VERSION_DBASE3', 'DBF_RECORD_ACTIVE', 'DBF_RECORD_DELETED',
    'DBF_LANG_NONE', 'DBF_LANG_US', 'DBF_LANG_WESTERN_EUROPE',
    'DBF_LANG_WINDOWS_ANSI', 'DBF_LANG_JAPAN',
    'DBF_DEFAULT_CHARSET', 'DBF_UNIVERSAL_CHARSET',
    'charset_for_code', 'code_for_charset', 'normalize_charset',
    'resolve_read_charset', 'resolve_write_charset',
    'build_field_spec', 'parse_field_spec', 'field_from_spec', 'validate_fields',
    'init_dbf_header', 'stamp_dbf_header', 'pack_dbf_header',
    'write_dbf_header', 'read_dbf_header',
    'check_record', 'encode_record', 'decode_record', 'encode_value', 'decode_value',
]

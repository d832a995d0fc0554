"""
Language driver table for DBF files.

Byte 29 of a dBase IV+ header names the code page used for field names
and character data. This module maps those bytes to Python codecs and back.
"""

import codecs
from typing import Dict, Optional, Tuple

from dbf_errors import DBFCharsetError


DBF_LANG_NONE = 0x00
DBF_LANG_US = 0x01
DBF_LANG_WESTERN_EUROPE = 0x02
DBF_LANG_WINDOWS_ANSI = 0x03
DBF_LANG_JAPAN = 0x7B

DBF_DEFAULT_CHARSET = 'iso8859-1'
# Written with language driver 0, readable by any consumer that assumes it
DBF_UNIVERSAL_CHARSET = 'utf-8'


# Language driver id -> codec. Order matters for the reverse lookup: the
# first code listed for a codec is the one written.
_LANGUAGE_DRIVERS = [
    (0x01, 'cp437'),         # U.S. MS-DOS
    (0x02, 'cp850'),         # International MS-DOS
    (0x03, 'cp1252'),        # Windows ANSI
    (0x04, 'mac_roman'),     # Standard Macintosh
    (0x57, 'cp1252'),        # ANSI (ESRI shapefiles)
    (0x58, 'cp1252'),        # Western European ANSI
    (0x59, 'cp1252'),        # Spanish ANSI
    (0x64, 'cp852'),         # Eastern European MS-DOS
    (0x65, 'cp866'),         # Russian MS-DOS
    (0x66, 'cp865'),         # Nordic MS-DOS
    (0x67, 'cp861'),         # Icelandic MS-DOS
    (0x6A, 'cp737'),         # Greek MS-DOS (437G)
    (0x6B, 'cp857'),         # Turkish MS-DOS
    (0x78, 'cp950'),         # Traditional Chinese Windows
    (0x79, 'cp949'),         # Korean Windows
    (0x7A, 'cp936'),         # Simplified Chinese Windows
    (0x7B, 'cp932'),         # Japanese Windows
    (0x7C, 'cp874'),         # Thai Windows
    (0x7D, 'cp1255'),        # Hebrew Windows
    (0x7E, 'cp1256'),        # Arabic Windows
    (0x96, 'mac_cyrillic'),  # Russian Macintosh
    (0x97, 'mac_latin2'),    # Macintosh EE
    (0x98, 'mac_greek'),     # Greek Macintosh
    (0xC8, 'cp1250'),        # Eastern European Windows
    (0xC9, 'cp1251'),        # Russian Windows
    (0xCA, 'cp1254'),        # Turkish Windows
    (0xCB, 'cp1253'),        # Greek Windows
]


def normalize_charset(charset: str) -> str:
    """Return the canonical Python codec name for a charset name."""
    try:
        return codecs.lookup(charset).name
    except (LookupError, TypeError) as e:
        raise DBFCharsetError(f"Unknown charset {charset!r}", e) from e


def _build_tables() -> Tuple[Dict[int, str], Dict[str, int]]:
    by_code = {}
    by_charset = {}
    for code, name in _LANGUAGE_DRIVERS:
        charset = normalize_charset(name)
        by_code[code] = charset
        by_charset.setdefault(charset, code)
    # One-way: Latin-1 has no id of its own, so it is written as Windows ANSI
    # and 0x03 reads back as cp1252. The two differ only in 0x80-0x9F.
    by_charset[normalize_charset(DBF_DEFAULT_CHARSET)] = DBF_LANG_WINDOWS_ANSI
    return by_code, by_charset


_CHARSET_BY_CODE, _CODE_BY_CHARSET = _build_tables()


def charset_for_code(code: int) -> Optional[str]:
    """
    Get the codec for a language driver id.

    Args:
        code: Language driver byte from the header

    Returns:
        Codec name, or None if the byte is 0 or unknown
    """
    return _CHARSET_BY_CODE.get(code)


def code_for_charset(charset: str) -> int:
    """
    Get the language driver id for a codec.

    Args:
        charset: Any name Python's codec registry accepts

    Returns:
        Language driver byte, or 0 if the codec has no dBase code
    """
    return _CODE_BY_CHARSET.get(normalize_charset(charset), DBF_LANG_NONE)


def resolve_write_charset(charset: Optional[str]) -> Tuple[str, int]:
    """
    Resolve the charset a new file will be written with.

    UTF-8 has no language driver id but is accepted and written as 0;
    any other unmapped codec is rejected.
    """
    name = normalize_charset(charset or DBF_DEFAULT_CHARSET)
    code = _CODE_BY_CHARSET.get(name, DBF_LANG_NONE)
    if code == DBF_LANG_NONE and name != normalize_charset(DBF_UNIVERSAL_CHARSET):
        raise DBFCharsetError(f"Unsupported charset {name}")
    return name, code


def resolve_read_charset(code: int, override: Optional[str] = None) -> str:
    """Pick the charset for an existing file: override, then header byte, then default."""
    if override:
        return normalize_charset(override)
    return charset_for_code(code) or normalize_charset(DBF_DEFAULT_CHARSET)


__all__ = [
    'DBF_LANG_NONE', 'DBF_LANG_US', 'DBF_LANG_WESTERN_EUROPE',
    'DBF_LANG_WINDOWS_ANSI', 'DBF_LANG_JAPAN',
    'DBF_DEFAULT_CHARSET', 'DBF_UNIVERSAL_CHARSET',
    'normalize_charset', 'charset_for_code', 'code_for_charset',
    'resolve_write_charset', 'resolve_read_charset',
]

"""
Test file for DBF date fields.
"""

import datetime
import unittest
from dbf_module import DBFField, DBFError, validate_fields, encode_value, decode_value
from dbf_record import format_date, parse_date


class TestDBFDate(unittest.TestCase):
    """Test cases for date encoding and decoding."""

    def setUp(self):
        """Set up test environment."""
        self.field = validate_fields([DBFField(name="BORN", field_type="D")], 'iso8859-1')[0]

    def test_encode_date(self):
        self.assertEqual(encode_value(self.field, datetime.date(2024, 1, 15), 'iso8859-1'), b'20240115')

    def test_encode_zero_padded(self):
        """Test that year, month and day are zero padded."""
        self.assertEqual(encode_value(self.field, datetime.date(5, 3, 7), 'iso8859-1'), b'00050307')

    def test_encode_datetime(self):
        """Test that a datetime is stored by its calendar date only."""
        value = datetime.datetime(2026, 1, 20, 23, 59, 59)
        self.assertEqual(encode_value(self.field, value, 'iso8859-1'), b'20260120')

    def test_encode_null(self):
        self.assertEqual(encode_value(self.field, None, 'iso8859-1'), b'        ')

    def test_encoding_is_stateless(self):
        """Test that alternating dates never leak into each other."""
        dates = [datetime.date(1999, 12, 31), datetime.date(2000, 2, 29), datetime.date(1999, 12, 31)]
        encoded = [encode_value(self.field, d, 'utf-8') for d in dates]
        self.assertEqual(encoded, [b'19991231', b'20000229', b'19991231'])

    def test_decode_date(self):
        self.assertEqual(decode_value(self.field, b'20240115', 'iso8859-1'), datetime.date(2024, 1, 15))
        self.assertIsNone(decode_value(self.field, b'        ', 'iso8859-1'))
        self.assertIsNone(decode_value(self.field, b'00000000', 'iso8859-1'))

    def test_decode_invalid_date(self):
        with self.assertRaises(DBFError):
            parse_date('20241301')
        with self.assertRaises(DBFError):
            parse_date('2024-1-1')

    def test_format_date(self):
        self.assertEqual(format_date(datetime.date(1984, 6, 1)), '19840601')


if __name__ == "__main__":
    unittest.main()

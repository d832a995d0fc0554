"""
Test file for reading DBF records back.
"""

import datetime
import io
import os
import shutil
import tempfile
import unittest
from dbf_module import DBFField, DBFReader, DBFStreamWriter, DBFError, DBFStateError


def build_sample():
    """In-memory file with three records of every writable type."""
    writer = DBFStreamWriter()
    writer.define_layout([
        DBFField(name="NAME", field_type="C", length=10),
        DBFField(name="AGE", field_type="N", length=3),
        DBFField(name="SALARY", field_type="N", length=10, decimals=2),
        DBFField(name="BORN", field_type="D"),
        DBFField(name="ACTIVE", field_type="L")
    ])
    writer.add_record(["Ann", 30, 1500.25, datetime.date(1994, 5, 17), True])
    writer.add_record(["Bob", 41, None, None, False])
    writer.add_record([None, None, None, None, None])
    writer.close()
    return writer.getvalue()


HEADER_SIZE = 32 + 5 * 32 + 1
RECORD_SIZE = 1 + 10 + 3 + 10 + 8 + 1


class TestDBFReader(unittest.TestCase):
    """Test cases for the sequential reader."""

    def setUp(self):
        """Set up test environment."""
        self.data = build_sample()

    def test_read_all(self):
        reader = DBFReader(io.BytesIO(self.data))
        self.assertEqual(reader.record_count, 3)
        self.assertEqual(reader.field_names, ["NAME", "AGE", "SALARY", "BORN", "ACTIVE"])
        self.assertEqual(list(reader), [
            ["Ann", 30, 1500.25, datetime.date(1994, 5, 17), True],
            ["Bob", 41, None, None, False],
            [None, None, None, None, None]
        ])
        self.assertIsNone(reader.read_record())

    def test_seek_to_record(self):
        reader = DBFReader(io.BytesIO(self.data))
        reader.seek_to_record(1)
        self.assertEqual(reader.read_record()[0], "Bob")

    def test_deleted_records(self):
        """Test that deleted records are skipped unless asked for."""
        data = bytearray(self.data)
        data[HEADER_SIZE] = ord('*')

        reader = DBFReader(io.BytesIO(bytes(data)))
        self.assertEqual([row[0] for row in reader], ["Bob", None])

        reader = DBFReader(io.BytesIO(bytes(data)), skip_deleted=False)
        deleted, values = reader.read_record_raw()
        self.assertTrue(deleted)
        self.assertEqual(values[0], "Ann")
        self.assertEqual(len(list(reader)), 2)

    def test_stops_at_end_marker(self):
        """Test a header that claims more records than the file holds."""
        data = bytearray(self.data)
        data[4] = 10
        reader = DBFReader(io.BytesIO(bytes(data)))
        self.assertEqual(len(list(reader)), 3)

    def test_charset_override(self):
        reader = DBFReader(io.BytesIO(self.data), charset='cp437')
        self.assertEqual(reader.charset, 'cp437')

    def test_closed_reader(self):
        reader = DBFReader(io.BytesIO(self.data))
        reader.close()
        reader.close()
        with self.assertRaises(DBFStateError):
            reader.read_record()

    def test_caller_stream_stays_open(self):
        stream = io.BytesIO(self.data)
        with DBFReader(stream) as reader:
            reader.read_record()
        self.assertFalse(stream.closed)

    def test_not_a_dbf_file(self):
        with self.assertRaises(DBFError):
            DBFReader(io.BytesIO(b'\x03'))


class TestDBFReaderFile(unittest.TestCase):
    """Test cases for reading from a path."""

    def setUp(self):
        """Set up test environment."""
        self.test_dir = tempfile.mkdtemp()
        self.filename = os.path.join(self.test_dir, "sample.dbf")
        with open(self.filename, "wb") as f:
            f.write(build_sample())

    def tearDown(self):
        """Clean up test files."""
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_read_path(self):
        with DBFReader(self.filename) as reader:
            rows = list(reader)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0][2], 1500.25)

    def test_missing_file(self):
        with self.assertRaises(DBFError) as ctx:
            DBFReader(os.path.join(self.test_dir, "missing.dbf"))
        self.assertIsInstance(ctx.exception.cause, FileNotFoundError)


if __name__ == "__main__":
    unittest.main()

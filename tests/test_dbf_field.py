"""
Test file for field descriptors and layout validation.
"""

import unittest
from dbf_module import (
    DBFField, DBFDataType, DBFLayoutError, DBFStreamWriter,
    build_field_spec, parse_field_spec, field_from_spec, validate_fields
)


class TestDBFDataType(unittest.TestCase):
    """Test cases for the field type model."""

    def test_type_letters(self):
        """Test lookup by type byte, including lower case letters."""
        self.assertIs(DBFDataType('C'), DBFDataType.CHARACTER)
        self.assertIs(DBFDataType('n'), DBFDataType.NUMERIC)
        self.assertIs(DBFDataType('@'), DBFDataType.TIMESTAMP)
        self.assertIs(DBFDataType('Z'), DBFDataType.UNKNOWN)

    def test_writable_subset(self):
        """Test that only C, N, F, D and L can be written."""
        writable = {t.code for t in DBFDataType if t.writable}
        self.assertEqual(writable, {'C', 'N', 'F', 'D', 'L'})

    def test_default_sizes(self):
        """Test the default length applied on commit when none is given."""
        fields = [
            DBFField("BORN", "D"),
            DBFField("FLAG", "L"),
            DBFField("QTY", DBFDataType.NUMERIC),
            DBFField("CODE", "C")
        ]
        committed = validate_fields(fields, 'iso8859-1')
        self.assertEqual([f.length for f in committed], [8, 1, 10, 1])
        self.assertEqual([f.offset for f in committed], [1, 9, 10, 20])

    def test_length_kept_as_given(self):
        """Test that a descriptor keeps a zero length until it is committed."""
        self.assertEqual(DBFField("CODE", "C").length, 0)
        self.assertEqual(DBFField("CODE", "C", 0).spec, "C(0)")


class TestDBFFieldSpec(unittest.TestCase):
    """Test cases for the compact field specification notation."""

    def test_build_field_spec(self):
        self.assertEqual(build_field_spec(DBFField("NAME", "C", 30)), "C(30)")
        self.assertEqual(build_field_spec(DBFField("PRICE", "N", 10, 2)), "N(10,2)")
        self.assertEqual(DBFField("BORN", "D", 8).spec, "D(8)")

    def test_parse_field_spec(self):
        self.assertEqual(parse_field_spec("C(30)"), (DBFDataType.CHARACTER, 30, 0))
        self.assertEqual(parse_field_spec(" n(10, 2) "), (DBFDataType.NUMERIC, 10, 2))
        self.assertEqual(parse_field_spec("D"), (DBFDataType.DATE, 8, 0))

    def test_parse_field_spec_invalid(self):
        for spec in ("", "X(3)", "C(abc)", "C()", "C30"):
            with self.assertRaises(DBFLayoutError, msg=spec):
                parse_field_spec(spec)

    def test_field_from_spec(self):
        field = field_from_spec("PRICE", "N(8,2)")
        self.assertEqual((field.name, field.field_type, field.length, field.decimals),
                         ("PRICE", DBFDataType.NUMERIC, 8, 2))


class TestDBFLayoutValidation(unittest.TestCase):
    """Test cases for committing a field layout."""

    def test_offsets_and_record_size(self):
        """Test that offsets start after the deletion flag."""
        fields = validate_fields([
            DBFField("NAME", "C", 10),
            DBFField("AGE", "N", 3),
            DBFField("FLAG", "L")
        ], 'iso8859-1')
        self.assertEqual([f.offset for f in fields], [1, 11, 14])

    def test_no_fields(self):
        with self.assertRaises(DBFLayoutError):
            validate_fields([], 'iso8859-1')
        with self.assertRaises(DBFLayoutError):
            validate_fields(None, 'iso8859-1')

    def test_too_many_fields(self):
        fields = [DBFField(f"F{i}", "C", 1) for i in range(256)]
        with self.assertRaises(DBFLayoutError) as ctx:
            validate_fields(fields, 'iso8859-1')
        self.assertIn("255", str(ctx.exception))

    def test_maximum_fields(self):
        fields = [DBFField(f"F{i}", "C", 1) for i in range(255)]
        self.assertEqual(len(validate_fields(fields, 'iso8859-1')), 255)

    def test_single_null_field(self):
        with self.assertRaises(DBFLayoutError) as ctx:
            validate_fields([DBFField("A", "C", 1), None], 'iso8859-1')
        self.assertEqual(str(ctx.exception), "Field 1 is null")

    def test_all_null_fields_reported(self):
        """Test that every null index is reported at once."""
        fields = [DBFField("A", "C", 1), None, DBFField("B", "C", 1), None]
        with self.assertRaises(DBFLayoutError) as ctx:
            validate_fields(fields, 'iso8859-1')
        self.assertEqual(str(ctx.exception), "Fields [1, 3] are null")

    def test_nulls_checked_before_types(self):
        with self.assertRaises(DBFLayoutError) as ctx:
            validate_fields([None, DBFField("NOTES", "M", 10)], 'iso8859-1')
        self.assertIn("null", str(ctx.exception))

    def test_read_only_type(self):
        with self.assertRaises(DBFLayoutError) as ctx:
            validate_fields([DBFField("NOTES", "M", 10)], 'iso8859-1')
        self.assertIn("not supported for writing", str(ctx.exception))

    def test_invalid_geometry(self):
        invalid = [
            DBFField("", "C", 5),
            DBFField("ABCDEFGHIJK", "C", 5),
            DBFField("NAME", "C", 255),
            DBFField("BORN", "D", 10),
            DBFField("FLAG", "L", 2),
            DBFField("QTY", "N", 33),
            DBFField("RATIO", "F", 21),
            DBFField("PRICE", "N", 3, 2),
            DBFField("PRICE", "N", 20, 16),
            DBFField("NAME", "C", 10, 2),
        ]
        for field in invalid:
            with self.assertRaises(DBFLayoutError, msg=field.spec):
                validate_fields([field], 'iso8859-1')

    def test_name_length_counts_encoded_bytes(self):
        """Test that the 10 byte limit applies after encoding."""
        field = DBFField("ÉÉÉÉÉÉ", "C", 5)
        validate_fields([field], 'cp1252')
        with self.assertRaises(DBFLayoutError):
            validate_fields([field], 'utf-8')

    def test_committed_layout_is_a_copy(self):
        """Test that changing the caller's fields later does not touch the writer."""
        fields = [DBFField("NAME", "C", 10)]
        writer = DBFStreamWriter()
        writer.define_layout(fields)

        fields[0].name = "CHANGED"
        fields[0].length = 50

        self.assertEqual(writer.fields[0].name, "NAME")
        self.assertEqual(writer.fields[0].length, 10)
        self.assertEqual(writer.header.record_size, 11)


if __name__ == "__main__":
    unittest.main()

# encoding: utf-8

import os
import unittest
from os.path import join as j

from bagr import tags
from bagr.errors import (
    InvalidBagItVersionError,
    InvalidStringError,
    InvalidTagError,
    InvalidTagLineError,
    InvalidTagLineWithRefError,
    IoCreateError,
    IoReadError,
    MissingTagError,
    UnsupportedEncodingError,
    UnsupportedVersionError,
)
from bagr.tags import BagDeclaration, BagInfo, BagItVersion, Tag, TagList

from test_bag import SelfCleaningTestCase, slurp_text_file


class TestTag(unittest.TestCase):
    def test_values_are_strings(self):
        self.assertEqual(Tag("Bag-Count", 3).value, "3")

    def test_invalid_labels(self):
        for label in ("", " Label", "Label\t", "La\nbel", "La\rbel", "La:bel"):
            self.assertRaises(InvalidTagError, Tag, label, "value")

    def test_invalid_values(self):
        self.assertRaises(InvalidTagError, Tag, "Label", "line 1\nline 2")
        self.assertRaises(InvalidTagError, Tag, "Label", "line 1\rline 2")

    def test_text_must_encode_as_utf8(self):
        self.assertRaises(InvalidTagError, Tag, "Contact-Name", "bad\udcff")
        self.assertRaises(InvalidTagError, Tag, "Bad\udcffLabel", "value")

    def test_inner_whitespace_is_allowed(self):
        tag = Tag("My Label", "  value with\tspace ")
        self.assertEqual(tag.label, "My Label")
        self.assertEqual(tag.value, "  value with\tspace ")

    def test_empty_value(self):
        self.assertEqual(Tag("Label", "").value, "")


class TestTagList(unittest.TestCase):
    def setUp(self):
        self.tags = TagList()
        self.tags.add_tag("Contact-Name", "Ed")
        self.tags.add_tag("Bagging-Date", "2020-01-01")
        self.tags.add_tag("contact-name", "Alice")

    def test_case_insensitive_lookup(self):
        self.assertEqual(self.tags.get_tag("CONTACT-NAME"), "Ed")
        self.assertEqual(self.tags.get_tags("Contact-Name"), ["Ed", "Alice"])
        self.assertIn("bagging-date", self.tags)
        self.assertNotIn("Payload-Oxum", self.tags)
        self.assertIsNone(self.tags.get_tag("Payload-Oxum"))

    def test_only_ascii_is_folded(self):
        self.tags.add_tag("Émoji", "1")
        self.assertIsNone(self.tags.get_tag("émoji"))
        self.assertEqual(self.tags.get_tag("ÉMOJI"), "1")

    def test_replace_keeps_position(self):
        self.tags.replace_tag("CONTACT-NAME", "Bob")
        self.assertEqual(
            list(self.tags),
            [Tag("CONTACT-NAME", "Bob"), Tag("Bagging-Date", "2020-01-01")],
        )

    def test_replace_appends_when_absent(self):
        self.tags.replace_tag("Payload-Oxum", "1.1")
        self.assertEqual(list(self.tags)[-1], Tag("Payload-Oxum", "1.1"))
        self.assertEqual(len(self.tags), 4)

    def test_remove(self):
        self.tags.remove_tags("contact-NAME")
        self.assertEqual(list(self.tags), [Tag("Bagging-Date", "2020-01-01")])


class TestBagItVersion(unittest.TestCase):
    def test_parse(self):
        self.assertEqual(BagItVersion.parse("1.0"), BagItVersion(1, 0))
        self.assertEqual(BagItVersion.parse("0.97"), BagItVersion(0, 97))
        self.assertEqual(str(BagItVersion.parse("255.255")), "255.255")

    def test_invalid(self):
        for value in ("", "1", "1.", ".0", "1.0.0", "a.b", "256.0", "1.256", " 1.0", "-1.0"):
            self.assertRaises(InvalidBagItVersionError, BagItVersion.parse, value)


class TestBagDeclaration(unittest.TestCase):
    def test_defaults(self):
        declaration = BagDeclaration()
        self.assertEqual(
            list(declaration.to_tags()),
            [Tag("BagIt-Version", "1.0"), Tag("Tag-File-Character-Encoding", "UTF-8")],
        )

    def test_unsupported(self):
        self.assertRaises(UnsupportedVersionError, BagDeclaration, BagItVersion(0, 97))
        self.assertRaises(UnsupportedEncodingError, BagDeclaration, encoding="ISO-8859-1")

    def test_missing_tags(self):
        with self.assertRaises(MissingTagError) as cm:
            BagDeclaration.from_tags(TagList())
        self.assertEqual(cm.exception.tag, "BagIt-Version")


class TestBagInfo(unittest.TestCase):
    def test_single_valued_labels_are_replaced(self):
        info = BagInfo()
        info.add_tag("Bagging-Date", "2019-01-01")
        info.add_tag("bagging-date", "2020-01-01")
        self.assertEqual(info.get_tags("Bagging-Date"), ["2020-01-01"])
        self.assertEqual(info.bagging_date, "2020-01-01")

    def test_repeatable_labels_are_appended(self):
        info = BagInfo()
        info.add_tag("Contact-Name", "Ed")
        info.add_contact_name("Alice")
        info.add_tag("Custom", "1")
        info.add_tag("Custom", "2")
        self.assertEqual(info.contact_names, ["Ed", "Alice"])
        self.assertEqual(info.get_tags("custom"), ["1", "2"])

    def test_properties(self):
        info = BagInfo()
        info.payload_oxum = "10.2"
        info.software_agent = "agent"
        info.bag_size = "10 B"
        self.assertEqual(info.payload_oxum, "10.2")
        self.assertEqual(len(info), 3)

        info.bag_size = None
        self.assertIsNone(info.bag_size)
        self.assertEqual(len(info), 2)

    def test_from_mapping(self):
        info = BagInfo.from_mapping(
            {"Source-Organization": ["A", "B"], "Bag-Count": "1 of 2", "Payload-Oxum": "1.1"}
        )
        self.assertEqual(info.source_organizations, ["A", "B"])
        self.assertEqual(info.bag_count, "1 of 2")
        self.assertEqual(len(info), 4)


class TestPayloadOxum(unittest.TestCase):
    def test_format(self):
        self.assertEqual(tags.format_payload_oxum(0, 0), "0.0")
        self.assertEqual(tags.format_payload_oxum(1024, 3), "1024.3")

    def test_parse(self):
        self.assertEqual(tags.parse_payload_oxum("1024.3"), (1024, 3))
        self.assertIsNone(tags.parse_payload_oxum("1024"))
        self.assertIsNone(tags.parse_payload_oxum("a.3"))
        self.assertIsNone(tags.parse_payload_oxum("1.2.3"))


class TestParseTagLine(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(tags.parse_tag_line("Label: value"), ("Label", "value"))
        self.assertEqual(tags.parse_tag_line("Label:\tvalue"), ("Label", "value"))
        self.assertEqual(tags.parse_tag_line("Label:  value"), ("Label", " value"))
        self.assertEqual(tags.parse_tag_line("Label: "), ("Label", ""))
        self.assertEqual(tags.parse_tag_line("Label: a: b"), ("Label", "a: b"))

    def test_invalid(self):
        for line in ("", "no separator", "Label:value", "Label:"):
            self.assertRaises(InvalidTagLineError, tags.parse_tag_line, line)


class TestTagFiles(SelfCleaningTestCase):
    def write_tags(self, contents):
        return self.write_file("tags.txt", contents.encode("utf-8"))

    def test_read(self):
        path = self.write_tags(
            "Source-Organization: Library\r\n of Congress\r\nContact-Name :\tEd\nEmpty: \n"
        )
        self.assertEqual(
            list(tags.read_tag_file(path)),
            [
                Tag("Source-Organization", "Library of Congress"),
                Tag("Contact-Name", "Ed"),
                Tag("Empty", ""),
            ],
        )

    def test_read_write_preserves_order(self):
        path = self.write_tags("B: 2\nA: 1\nb: 3\nCustom Label: x: y\n")

        read = tags.read_tag_file(path)
        out = j(self.tmpdir, "out.txt")
        tags.write_tag_file(read, out)

        self.assertEqual(slurp_text_file(out), "B: 2\nA: 1\nb: 3\nCustom Label: x: y\n")
        self.assertEqual(tags.read_tag_file(out), read)

    def test_invalid_line_has_reference(self):
        path = self.write_tags("A: 1\n  continued\nB 2\n")
        with self.assertRaises(InvalidTagLineWithRefError) as cm:
            tags.read_tag_file(path)
        self.assertEqual(cm.exception.path, path)
        self.assertEqual(cm.exception.num, 2)
        self.assertIn("Tag number 2 in file", str(cm.exception))

    def test_blank_line_is_invalid(self):
        path = self.write_tags("A: 1\n\nB: 2\n")
        self.assertRaises(InvalidTagLineWithRefError, tags.read_tag_file, path)

    def test_invalid_label(self):
        path = self.write_tags(": no label\n")
        self.assertRaises(InvalidTagLineWithRefError, tags.read_tag_file, path)

    def test_invalid_utf8(self):
        path = self.write_file("tags.txt", b"A: \xff\n")
        self.assertRaises(InvalidStringError, tags.read_tag_file, path)

    def test_missing_file(self):
        self.assertRaises(IoReadError, tags.read_tag_file, j(self.tmpdir, "missing.txt"))

    def test_write_to_missing_directory(self):
        self.assertRaises(
            IoCreateError, tags.write_tag_file, TagList(), j(self.tmpdir, "no", "tags.txt")
        )

    def test_read_bag_info_missing(self):
        self.assertEqual(len(tags.read_bag_info(self.src)), 0)

    def test_declaration_round_trip(self):
        tags.write_bag_declaration(BagDeclaration(), self.src)
        self.assertEqual(
            slurp_text_file(j(self.src, "bagit.txt")),
            "BagIt-Version: 1.0\nTag-File-Character-Encoding: UTF-8\n",
        )
        self.assertEqual(tags.read_bag_declaration(self.src), BagDeclaration())
        self.assertTrue(os.path.isfile(j(self.src, "bagit.txt")))


if __name__ == "__main__":
    unittest.main()

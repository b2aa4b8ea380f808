# test_objects.py -- tests for objects.py
# Copyright (C) 2026 The mygit contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# mygit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Tests for git base objects."""

import hashlib
from io import BytesIO

from mygit.errors import InvalidHash, MalformedBody, MalformedHeader
from mygit.objects import (
    BLOB_MODE,
    TREE_MODE,
    Blob,
    Commit,
    ShaFile,
    Tree,
    TreeEntry,
    check_hexsha,
    format_timezone,
    hex_to_filename,
    hex_to_sha,
    object_class,
    object_header,
    parse_object_header,
    parse_timezone,
    parse_tree,
    pretty_format_tree_entry,
    read_object_header,
    serialize_tree,
    sha_to_hex,
    sorted_tree_items,
    valid_hexsha,
)

from . import TestCase

hello_sha = b"ce013625030ba8dba906f756967f9e9ca394464a"
empty_blob_sha = b"e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
empty_tree_sha = b"4b825dc642cb6eb9a060e54bf8d69288fbee4904"
a_sha = b"a" * 40
b_sha = b"b" * 40


class HexShaTests(TestCase):
    def test_sha_to_hex_round_trip(self) -> None:
        raw = hex_to_sha(hello_sha)
        self.assertEqual(20, len(raw))
        self.assertEqual(hello_sha, sha_to_hex(raw))

    def test_valid_hexsha(self) -> None:
        self.assertTrue(valid_hexsha(hello_sha))
        self.assertTrue(valid_hexsha(hello_sha.decode("ascii")))
        self.assertFalse(valid_hexsha(hello_sha.upper()))
        self.assertFalse(valid_hexsha(hello_sha[:-1]))
        self.assertFalse(valid_hexsha(b"g" * 40))

    def test_check_hexsha_normalizes_case(self) -> None:
        self.assertEqual(hello_sha, check_hexsha(hello_sha.upper()))
        self.assertEqual(hello_sha, check_hexsha(hello_sha.decode("ascii")))

    def test_check_hexsha_wrong_length(self) -> None:
        self.assertRaises(InvalidHash, check_hexsha, b"abc")
        self.assertRaises(InvalidHash, check_hexsha, hello_sha + b"0")

    def test_check_hexsha_not_hex(self) -> None:
        with self.assertRaises(InvalidHash) as cm:
            check_hexsha("z" * 40)
        self.assertEqual("z" * 40, cm.exception.sha)

    def test_invalid_hash_is_value_error(self) -> None:
        self.assertRaises(ValueError, check_hexsha, "é" * 40)

    def test_hex_to_filename(self) -> None:
        self.assertEqual(
            "/objects/ce/013625030ba8dba906f756967f9e9ca394464a",
            hex_to_filename("/objects", hello_sha).replace("\\", "/"),
        )


class HeaderTests(TestCase):
    def test_object_header(self) -> None:
        self.assertEqual(b"blob 6\0", object_header(b"blob", 6))
        self.assertEqual(b"tree 0\0", object_header(b"tree", 0))

    def test_parse_object_header(self) -> None:
        self.assertEqual(
            (b"blob", 6, 7), parse_object_header(b"blob 6\0hello\n")
        )

    def test_parse_object_header_unknown_kind(self) -> None:
        self.assertRaises(MalformedHeader, parse_object_header, b"tag 3\0abc")

    def test_parse_object_header_bad_length(self) -> None:
        for data in [b"blob x\0", b"blob -1\0", b"blob 06\0", b"blob \0", b"blob\0"]:
            self.assertRaises(MalformedHeader, parse_object_header, data)

    def test_parse_object_header_extra_field(self) -> None:
        self.assertRaises(MalformedHeader, parse_object_header, b"blob 6 7\0")

    def test_parse_object_header_without_nul(self) -> None:
        self.assertRaises(MalformedHeader, parse_object_header, b"blob 6")

    def test_read_object_header_leaves_body(self) -> None:
        f = BytesIO(b"commit 11\0tree abcdef")
        self.assertEqual((b"commit", 11), read_object_header(f))
        self.assertEqual(b"tree abcdef", f.read())

    def test_read_object_header_eof(self) -> None:
        self.assertRaises(MalformedHeader, read_object_header, BytesIO(b"blob 6"))

    def test_read_object_header_too_long(self) -> None:
        self.assertRaises(
            MalformedHeader, read_object_header, BytesIO(b"blob " + b"1" * 64)
        )

    def test_object_class(self) -> None:
        self.assertIs(Blob, object_class(b"blob"))
        self.assertIs(Tree, object_class(b"tree"))
        self.assertIs(Commit, object_class(b"commit"))
        self.assertIsNone(object_class(b"tag"))


class BlobReadTests(TestCase):
    def test_encoding(self) -> None:
        b = Blob.from_string(b"hello\n")
        self.assertEqual(b"blob 6\0hello\n", b.as_encoded())
        self.assertEqual(hello_sha, b.id)

    def test_hash_is_sha1_of_encoding(self) -> None:
        b = Blob.from_string(b"some data")
        self.assertEqual(
            hashlib.sha1(b"blob 9\0some data").hexdigest().encode("ascii"), b.id
        )

    def test_empty(self) -> None:
        b = Blob()
        self.assertEqual(b"", b.data)
        self.assertEqual(empty_blob_sha, b.id)

    def test_data_setter(self) -> None:
        b = Blob()
        b.data = b"hello\n"
        self.assertEqual(hello_sha, b.id)
        self.assertEqual(6, b.raw_length())

    def test_hash_sensitivity(self) -> None:
        self.assertNotEqual(
            Blob.from_string(b"hello\n").id, Blob.from_string(b"hello").id
        )

    def test_binary_content(self) -> None:
        data = bytes(range(256)) * 4
        b = Blob.from_string(data)
        self.assertEqual(data, b.data)
        self.assertEqual(
            b"blob 1024\0" + data, b.as_encoded()
        )

    def test_eq(self) -> None:
        self.assertEqual(Blob.from_string(b"x"), Blob.from_string(b"x"))
        self.assertNotEqual(Blob.from_string(b"x"), Blob.from_string(b"y"))

    def test_from_encoded(self) -> None:
        obj = ShaFile.from_encoded(b"blob 6\0hello\n")
        self.assertIsInstance(obj, Blob)
        self.assertEqual(b"hello\n", obj.data)

    def test_from_encoded_length_mismatch(self) -> None:
        self.assertRaises(MalformedHeader, ShaFile.from_encoded, b"blob 7\0hello\n")

    def test_from_raw_string_unknown_kind(self) -> None:
        self.assertRaises(MalformedHeader, ShaFile.from_raw_string, b"tag", b"")

    def test_legacy_object_is_compressed_encoding(self) -> None:
        import zlib

        b = Blob.from_string(b"hello\n")
        self.assertEqual(b"blob 6\0hello\n", zlib.decompress(b.as_legacy_object()))


class TreeTests(TestCase):
    def test_empty_tree(self) -> None:
        t = Tree()
        self.assertEqual(b"", t.as_raw_string())
        self.assertEqual(empty_tree_sha, t.id)

    def test_serialize_entry(self) -> None:
        t = Tree()
        t.add(b"hello.txt", BLOB_MODE, hello_sha)
        expected = b"100644 hello.txt\0" + hex_to_sha(hello_sha)
        self.assertEqual(expected, t.as_raw_string())
        self.assertEqual(
            hashlib.sha1(b"tree %d\0" % len(expected) + expected)
            .hexdigest()
            .encode("ascii"),
            t.id,
        )

    def test_tree_mode_has_no_leading_zero(self) -> None:
        t = Tree()
        t.add(b"sub", TREE_MODE, empty_tree_sha)
        self.assertEqual(
            b"40000 sub\0" + hex_to_sha(empty_tree_sha), t.as_raw_string()
        )

    def test_insertion_order_preserved(self) -> None:
        t = Tree()
        t.add(b"b", BLOB_MODE, a_sha)
        t.add(b"a", BLOB_MODE, b_sha)
        self.assertEqual([b"b", b"a"], [e.path for e in t.iteritems()])
        self.assertEqual([b"b", b"a"], [e.path for e in parse_tree(t.as_raw_string())])

    def test_add_invalid_name(self) -> None:
        t = Tree()
        for name in [b"", b"a/b", b"a\0b"]:
            self.assertRaises(ValueError, t.add, name, BLOB_MODE, a_sha)

    def test_add_invalid_sha(self) -> None:
        self.assertRaises(InvalidHash, Tree().add, b"a", BLOB_MODE, b"abc")

    def test_round_trip(self) -> None:
        t = Tree()
        t.add(b"file", BLOB_MODE, a_sha)
        t.add(b"dir", TREE_MODE, b_sha)
        t2 = Tree.from_string(t.as_raw_string())
        self.assertEqual(t.items(), t2.items())
        self.assertEqual(t.id, t2.id)
        self.assertEqual((TREE_MODE, b_sha), t2[b"dir"])
        self.assertIn(b"file", t2)
        self.assertEqual(2, len(t2))

    def test_parse_tree(self) -> None:
        body = b"100644 a\0" + b"\x01" * 20 + b"40000 b\0" + b"\x02" * 20
        self.assertEqual(
            [
                TreeEntry(b"a", BLOB_MODE, b"01" * 20),
                TreeEntry(b"b", TREE_MODE, b"02" * 20),
            ],
            list(parse_tree(body)),
        )

    def test_parse_tree_truncated_hash(self) -> None:
        body = b"100644 a\0" + b"\x01" * 19
        self.assertRaises(MalformedBody, list, parse_tree(body))

    def test_parse_tree_truncated_header(self) -> None:
        self.assertRaises(MalformedBody, list, parse_tree(b"100644 a"))

    def test_parse_tree_bad_mode(self) -> None:
        body = b"10064x a\0" + b"\x01" * 20
        self.assertRaises(MalformedBody, list, parse_tree(body))

    def test_parse_tree_missing_mode(self) -> None:
        body = b"a\0" + b"\x01" * 20
        self.assertRaises(MalformedBody, list, parse_tree(body))

    def test_duplicate_names(self) -> None:
        body = b"100644 a\0" + b"\x01" * 20 + b"100644 a\0" + b"\x02" * 20
        self.assertRaises(MalformedBody, Tree.from_string, body)

    def test_serialize_tree(self) -> None:
        self.assertEqual(
            [b"100644 a\0" + hex_to_sha(a_sha)],
            list(serialize_tree([(b"a", BLOB_MODE, a_sha)])),
        )

    def test_sorted_tree_items(self) -> None:
        entries = {
            b"foo.c": (BLOB_MODE, a_sha),
            b"foo": (TREE_MODE, b_sha),
            b"bar": (BLOB_MODE, a_sha),
        }
        self.assertEqual(
            [b"bar", b"foo.c", b"foo"],
            [e.path for e in sorted_tree_items(entries)],
        )

    def test_pretty_format_tree_entry(self) -> None:
        self.assertEqual(
            "100644 blob {}\tfoo\n".format(a_sha.decode()),
            pretty_format_tree_entry(b"foo", BLOB_MODE, a_sha),
        )
        self.assertEqual(
            "40000 tree {}\tsub\n".format(b_sha.decode()),
            pretty_format_tree_entry(b"sub", TREE_MODE, b_sha),
        )

    def test_as_pretty_string(self) -> None:
        t = Tree()
        t.add(b"sub", TREE_MODE, b_sha)
        self.assertEqual(
            "40000 tree {}\tsub\n".format(b_sha.decode()), t.as_pretty_string()
        )


class TimezoneTests(TestCase):
    def test_parse_timezone(self) -> None:
        self.assertEqual(3600, parse_timezone(b"+0100"))
        self.assertEqual(-5 * 3600, parse_timezone(b"-0500"))
        self.assertEqual(5 * 3600 + 30 * 60, parse_timezone(b"+0530"))
        self.assertEqual(0, parse_timezone(b"+0000"))

    def test_parse_timezone_invalid(self) -> None:
        for text in [b"0100", b"+100", b"+01:00", b"", b"+01000"]:
            self.assertRaises(ValueError, parse_timezone, text)

    def test_format_timezone(self) -> None:
        self.assertEqual(b"+0100", format_timezone(3600))
        self.assertEqual(b"-0500", format_timezone(-5 * 3600))
        self.assertEqual(b"+0530", format_timezone(5 * 3600 + 30 * 60))
        self.assertEqual(b"-0030", format_timezone(-30 * 60))
        self.assertEqual(b"+0000", format_timezone(0))

    def test_format_timezone_seconds(self) -> None:
        self.assertRaises(ValueError, format_timezone, 61)


def make_commit(**attrs) -> Commit:
    c = Commit()
    c.tree = attrs.pop("tree", empty_tree_sha)
    c.author = c.committer = b"A U Thor <author@example.com>"
    c.author_time = c.commit_time = 1234567890
    c.author_timezone = c.commit_timezone = 3600
    c.message = b"Initial commit\n"
    for name, value in attrs.items():
        setattr(c, name, value)
    return c


class CommitSerializationTests(TestCase):
    def test_no_parent(self) -> None:
        c = make_commit()
        self.assertEqual(
            b"tree " + empty_tree_sha + b"\n"
            b"author A U Thor <author@example.com> 1234567890 +0100\n"
            b"committer A U Thor <author@example.com> 1234567890 +0100\n"
            b"\n"
            b"Initial commit\n",
            c.as_raw_string(),
        )
        self.assertNotIn(b"parent", c.as_raw_string())

    def test_one_parent(self) -> None:
        c = make_commit(parents=[a_sha])
        lines = c.as_raw_string().split(b"\n")
        self.assertEqual(b"tree " + empty_tree_sha, lines[0])
        self.assertEqual(b"parent " + a_sha, lines[1])
        self.assertTrue(lines[2].startswith(b"author "))

    def test_negative_timezone(self) -> None:
        c = make_commit(author_timezone=-4 * 3600, commit_timezone=-4 * 3600)
        self.assertIn(b" 1234567890 -0400\n", c.as_raw_string())

    def test_hash_matches_encoding(self) -> None:
        c = make_commit()
        self.assertEqual(
            hashlib.sha1(c.as_encoded()).hexdigest().encode("ascii"), c.id
        )

    def test_tree_setter_validates(self) -> None:
        c = Commit()
        with self.assertRaises(InvalidHash):
            c.tree = b"not-a-sha"

    def test_missing_tree(self) -> None:
        c = Commit()
        c.author = c.committer = b"A <a@example.com>"
        c.author_time = c.commit_time = 0
        self.assertRaises(ValueError, c.as_raw_string)

    def test_missing_author(self) -> None:
        c = Commit()
        c.tree = empty_tree_sha
        self.assertRaises(ValueError, c.as_raw_string)


class CommitParseTests(TestCase):
    def test_round_trip(self) -> None:
        c = make_commit(parents=[a_sha])
        c2 = Commit.from_string(c.as_raw_string())
        self.assertEqual(empty_tree_sha, c2.tree)
        self.assertEqual([a_sha], c2.parents)
        self.assertEqual(b"A U Thor <author@example.com>", c2.author)
        self.assertEqual(b"A U Thor <author@example.com>", c2.committer)
        self.assertEqual(1234567890, c2.author_time)
        self.assertEqual(1234567890, c2.commit_time)
        self.assertEqual(3600, c2.author_timezone)
        self.assertEqual(3600, c2.commit_timezone)
        self.assertEqual(b"Initial commit\n", c2.message)
        self.assertEqual(c.id, c2.id)

    def test_message_with_blank_lines(self) -> None:
        c = make_commit(message=b"Subject\n\nBody\n")
        c2 = Commit.from_string(c.as_raw_string())
        self.assertEqual(b"Subject\n\nBody\n", c2.message)

    def test_no_blank_line(self) -> None:
        c = make_commit()
        text = c.as_raw_string().replace(b"\n\n", b"\n")
        self.assertRaises(MalformedBody, Commit.from_string, text)

    def test_unknown_header(self) -> None:
        c = make_commit()
        text = c.as_raw_string().replace(
            b"\n\nInitial", b"\nencoding latin1\n\nInitial"
        )
        self.assertRaises(MalformedBody, Commit.from_string, text)

    def test_missing_committer(self) -> None:
        text = (
            b"tree " + empty_tree_sha + b"\n"
            b"author A U Thor <author@example.com> 1234567890 +0100\n"
            b"\n"
            b"msg\n"
        )
        self.assertRaises(MalformedBody, Commit.from_string, text)

    def test_invalid_tree(self) -> None:
        text = make_commit().as_raw_string().replace(empty_tree_sha, b"x" * 40)
        self.assertRaises(MalformedBody, Commit.from_string, text)

    def test_invalid_timezone(self) -> None:
        text = make_commit().as_raw_string().replace(b"+0100", b"+01")
        self.assertRaises(MalformedBody, Commit.from_string, text)

    def test_via_raw_string(self) -> None:
        c = make_commit()
        obj = ShaFile.from_raw_string(b"commit", c.as_raw_string())
        self.assertIsInstance(obj, Commit)
        self.assertEqual(c, obj)

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from core.properties import format_property, parse_properties, read_properties, update_properties


class ParsePropertiesTests(unittest.TestCase):
    def test_separators_comments_and_continuations(self) -> None:
        text = (
            "# comment\n"
            "! other comment\n"
            "storePassword=secret\n"
            "keyAlias : upload\n"
            "storeFile keystore.jks\n"
            "multi=one,\\\n"
            "    two\n"
            "url=https\\://example.com\n"
        )
        self.assertEqual(
            parse_properties(text),
            {
                "storePassword": "secret",
                "keyAlias": "upload",
                "storeFile": "keystore.jks",
                "multi": "one,two",
                "url": "https://example.com",
            },
        )

    def test_unicode_escape(self) -> None:
        self.assertEqual(parse_properties("name=caf\\u00e9\n"), {"name": "café"})

    def test_missing_file_is_empty(self) -> None:
        self.assertEqual(read_properties(Path("/nonexistent/key.properties")), {})

    def test_format_property_escapes_separators(self) -> None:
        self.assertEqual(
            format_property("distributionUrl", "https://x.org/a=b"),
            "distributionUrl=https\\://x.org/a\\=b",
        )
        self.assertEqual(format_property("key name", " padded"), "key\\ name=\\ padded")


class UpdatePropertiesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "gradle-wrapper.properties"

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_replaces_in_place_and_appends(self) -> None:
        self.path.write_text("# header\ndistributionUrl=old\\\n  continued\nzipStorePath=dists\n", encoding="utf-8")
        update_properties(self.path, {"distributionUrl": "new", "networkTimeout": "10000"})
        self.assertEqual(
            self.path.read_text(encoding="utf-8"),
            "# header\ndistributionUrl=new\nzipStorePath=dists\nnetworkTimeout=10000\n",
        )

    def test_keeps_crlf(self) -> None:
        self.path.write_bytes(b"a=1\r\nb=2")
        update_properties(self.path, {"b": "3", "c": "4"})
        self.assertEqual(self.path.read_bytes(), b"a=1\r\nb=3\r\nc=4\r\n")

    def test_keeps_comments_and_untouched_layout(self) -> None:
        self.path.write_text("#Tue Jan 01 2030\nzipStoreBase : GRADLE_USER_HOME\nurl=old\n", encoding="utf-8")
        update_properties(self.path, {"url": "https://example.com/a.zip"})
        self.assertEqual(
            self.path.read_text(encoding="utf-8"),
            "#Tue Jan 01 2030\nzipStoreBase : GRADLE_USER_HOME\nurl=https\\://example.com/a.zip\n",
        )

    def test_creates_missing_file(self) -> None:
        target = self.path.parent / "nested" / "x.properties"
        update_properties(target, {"k": "v"})
        self.assertEqual(read_properties(target), {"k": "v"})


if __name__ == "__main__":
    unittest.main()

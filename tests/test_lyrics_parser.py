"""
LRC 파서 테스트.
"""

import os
import sys
import tempfile
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(TEST_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from core.models import WordInfo
from services.lyrics_parser import LyricsParser, format_timestamp, parse_timestamp, to_lrc


def _tuples(lines):
    return [(line.time_ms, line.content, line.translation) for line in lines]


class TestTimestamp(unittest.TestCase):
    def test_fraction_digits(self):
        self.assertEqual(parse_timestamp("01:02"), 62000)
        self.assertEqual(parse_timestamp("00:01.5"), 1500)
        self.assertEqual(parse_timestamp("00:01.05"), 1050)
        self.assertEqual(parse_timestamp("00:01.005"), 1005)

    def test_out_of_range(self):
        """항상 1시간 미만으로 해석"""
        with self.assertRaises(ValueError):
            parse_timestamp("00:75.00")
        with self.assertRaises(ValueError):
            parse_timestamp("61:00.00")

    def test_format(self):
        self.assertEqual(format_timestamp(62005), "01:02.005")


class TestLyricsParser(unittest.TestCase):
    def setUp(self):
        self.parser = LyricsParser()

    def test_plain_lines(self):
        lines = self.parser.parse("[00:01.00] Line 1 \n[00:02.50]Line 2")
        self.assertEqual(_tuples(lines), [(1000, "Line 1", None), (2500, "Line 2", None)])
        self.assertEqual(lines[0].words, [])

    def test_angle_bracket_line(self):
        lines = self.parser.parse("<00:03.00>text")
        self.assertEqual(_tuples(lines), [(3000, "text", None)])

    def test_word_timed_line(self):
        lines = self.parser.parse("[00:01.00]<00:01.00>Hel<00:01.30>lo")
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].content, "Hello")
        self.assertEqual(lines[0].words, [WordInfo(1000, "Hel"), WordInfo(1300, "lo")])

    def test_text_before_first_word_tag_kept(self):
        """첫 태그 앞 텍스트는 줄 시작 시각의 단어로 보존"""
        lines = self.parser.parse("[00:02.00]I <00:02.50>love <00:03.00>you")
        self.assertEqual(lines[0].content, "I love you")
        self.assertEqual(lines[0].words[0], WordInfo(2000, "I "))
        self.assertEqual(len(lines[0].words), 3)

    def test_translation_merge(self):
        lines = self.parser.parse("[00:05.00]你好\n[00:05.02]Hello")
        self.assertEqual(_tuples(lines), [(5000, "你好", "Hello")])

    def test_empty_line_keeps_existing_translation(self):
        lines = self.parser.parse("[00:05.00]你好\n[00:05.00]Hello\n[00:05.01]")
        self.assertEqual(_tuples(lines), [(5000, "你好", "Hello")])

    def test_no_merge_outside_tolerance(self):
        lines = self.parser.parse("[00:05.00]A\n[00:05.06]B")
        self.assertEqual(_tuples(lines), [(5000, "A", None), (5060, "B", None)])

    def test_word_timed_line_not_merged(self):
        """逐字 줄은 같은 시각이어도 번역으로 병합하지 않음"""
        lines = self.parser.parse("[00:05.00]A\n[00:05.00]<00:05.00>B<00:05.50>C")
        self.assertEqual(len(lines), 2)
        self.assertIsNone(lines[0].translation)
        self.assertEqual(lines[1].content, "BC")

    def test_invalid_lines_skipped(self):
        text = "\n".join([
            "[ti:Title]",
            "[ar:Artist]",
            "no timestamp here",
            "[00:75.00]bad seconds",
            "[00:01.00]<00:99.00>bad word",
            "[00:04.00]ok",
        ])
        lines = self.parser.parse(text)
        self.assertEqual(_tuples(lines), [(4000, "ok", None)])

    def test_sorted_and_stable(self):
        text = "[00:10.00]<00:10.00>B\n[00:03.00]A\n[00:10.00]<00:10.00>C"
        lines = self.parser.parse(text)
        self.assertEqual([line.content for line in lines], ["A", "B", "C"])

    def test_roundtrip_idempotent(self):
        text = "\n".join([
            "[00:12.00]Third",
            "[00:01.00]First",
            "[00:01.00]첫째",
            "[00:05.00]<00:05.00>Se<00:05.40>cond",
            "[00:05.01]둘째",
            "[00:20.00]",
        ])
        first = self.parser.parse(text)
        second = self.parser.parse(to_lrc(first))
        self.assertEqual(_tuples(first), _tuples(second))
        self.assertEqual([l.words for l in first], [l.words for l in second])

    def test_parse_file_missing(self):
        self.assertEqual(self.parser.parse_file(os.path.join(TEST_DIR, "no_such_file.lrc")), [])
        self.assertEqual(self.parser.parse_file(None), [])

    def test_parse_file_encodings(self):
        with tempfile.TemporaryDirectory() as tmp:
            utf8_path = os.path.join(tmp, "utf8.lrc")
            with open(utf8_path, "w", encoding="utf-8-sig") as f:
                f.write("[00:01.00]你好\n")
            gbk_path = os.path.join(tmp, "gbk.lrc")
            with open(gbk_path, "wb") as f:
                f.write("[00:01.00]你好\n".encode("gb18030"))

            self.assertEqual(_tuples(self.parser.parse_file(utf8_path)), [(1000, "你好", None)])
            self.assertEqual(_tuples(self.parser.parse_file(gbk_path)), [(1000, "你好", None)])


if __name__ == "__main__":
    unittest.main(verbosity=2)

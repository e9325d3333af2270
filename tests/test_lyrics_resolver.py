"""
가사 파일 탐색 테스트.
"""

import os
import sys
import tempfile
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(TEST_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from services.lyrics_resolver import LyricsResolver, clean_title, sanitize_filename, split_patterns


class TestHelpers(unittest.TestCase):
    def test_sanitize(self):
        self.assertEqual(sanitize_filename('AC/DC: "Live"?'), "AC_DC_ _Live__")

    def test_clean_title(self):
        self.assertEqual(clean_title("Song.mp3"), "Song")
        self.assertEqual(clean_title("Song (Live) [2020]"), "Song")
        self.assertEqual(clean_title("노래 【MV】"), "노래")
        self.assertEqual(clean_title("(Intro)"), "(Intro)")

    def test_split_patterns(self):
        self.assertEqual(split_patterns("{Artist} - {Title}; {Title} ;"), ["{Artist} - {Title}", "{Title}"])
        self.assertEqual(split_patterns(["{Title}", ""]), ["{Title}"])
        self.assertEqual(split_patterns(None), [])


class TestLyricsResolver(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.folder = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def _touch(self, name):
        path = os.path.join(self.folder, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write("[00:01.00]x\n")
        return path

    def test_pattern_match_ignores_case_and_spacing(self):
        path = self._touch("artist  -  TITLE.lrc")
        self._touch("Title.lrc")
        resolver = LyricsResolver(self.folder, ["{Artist} - {Title}", "{Title}"])
        self.assertEqual(resolver.resolve("Title", "Artist"), path)

    def test_pattern_order(self):
        self._touch("Artist - Title.lrc")
        path = self._touch("Title.lrc")
        resolver = LyricsResolver(self.folder, "{Title};{Artist} - {Title}")
        self.assertEqual(resolver.resolve("Title", "Artist"), path)

    def test_cleaned_title_preferred(self):
        path = self._touch("Artist - Song.lrc")
        resolver = LyricsResolver(self.folder, ["{Artist} - {Title}"])
        self.assertEqual(resolver.resolve("Song (Live)", "Artist"), path)

    def test_sanitized_title(self):
        path = self._touch("AC_DC - Back_Up.lrc")
        resolver = LyricsResolver(self.folder, ["{Artist} - {Title}"])
        self.assertEqual(resolver.resolve("Back/Up", "AC/DC"), path)

    def test_fuzzy_prefers_artist(self):
        self._touch("01 Hello (Cover).lrc")
        path = self._touch("Adele_Hello_karaoke.lrc")
        resolver = LyricsResolver(self.folder, ["{Artist} - {Title}"])
        self.assertEqual(resolver.resolve("Hello", "Adele"), path)

    def test_fuzzy_title_only(self):
        path = self._touch("01 hello world.lrc")
        resolver = LyricsResolver(self.folder, [])
        self.assertEqual(resolver.resolve("Hello World", "Nobody"), path)

    def test_non_lrc_ignored(self):
        self._touch("Title.txt")
        resolver = LyricsResolver(self.folder, ["{Title}"])
        self.assertIsNone(resolver.resolve("Title", ""))

    def test_subfolders_ignored(self):
        os.makedirs(os.path.join(self.folder, "sub"))
        with open(os.path.join(self.folder, "sub", "Title.lrc"), "w", encoding="utf-8") as f:
            f.write("")
        resolver = LyricsResolver(self.folder, ["{Title}"])
        self.assertIsNone(resolver.resolve("Title", ""))

    def test_not_found(self):
        self._touch("Something Else.lrc")
        resolver = LyricsResolver(self.folder, ["{Title}"])
        self.assertIsNone(resolver.resolve("Title", "Artist"))

    def test_empty_title_or_missing_folder(self):
        self._touch("Title.lrc")
        self.assertIsNone(LyricsResolver(self.folder, ["{Title}"]).resolve("   ", "Artist"))
        missing = os.path.join(self.folder, "missing")
        self.assertIsNone(LyricsResolver(missing, ["{Title}"]).resolve("Title", "Artist"))


if __name__ == "__main__":
    unittest.main(verbosity=2)

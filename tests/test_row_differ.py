"""
증분 전송(행 지문 비교) 테스트.
"""

import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(TEST_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from core.models import DisplayRow, LyricLine, RowKind, WordInfo
from services.row_differ import RowDiffer, fingerprint


def _row(index, text, kind=RowKind.CONTENT, source=None, active=False):
    return DisplayRow(index, kind, text, source or LyricLine(index * 1000, text), active)


def _sent(result):
    return [item.physical_index for item in result]


class TestRowDiffer(unittest.TestCase):
    def setUp(self):
        self.differ = RowDiffer()
        self.rows = [_row(0, "a"), _row(0, "A", RowKind.TRANSLATION), _row(1, "b")]

    def test_first_call_sends_all(self):
        self.assertEqual(_sent(self.differ.diff(self.rows, incremental=True)), [0, 1, 2])

    def test_identical_rows_send_nothing(self):
        self.differ.diff(self.rows, incremental=True)
        self.assertEqual(self.differ.diff(self.rows, incremental=True), [])

    def test_clear_forces_full_refresh(self):
        self.differ.diff(self.rows, incremental=True)
        self.differ.clear()
        self.assertEqual(_sent(self.differ.diff(self.rows, incremental=True)), [0, 1, 2])

    def test_only_changed_slots(self):
        self.differ.diff(self.rows, incremental=True)
        shifted = [self.rows[0], self.rows[1], _row(2, "c")]
        result = self.differ.diff(shifted, incremental=True)
        self.assertEqual(_sent(result), [2])
        self.assertEqual(result[0].row.text, "c")

    def test_same_text_different_line_is_change(self):
        self.differ.diff([_row(0, "la")], incremental=True)
        self.assertEqual(_sent(self.differ.diff([_row(1, "la")], incremental=True)), [0])

    def test_non_incremental_sends_non_empty_rows(self):
        rows = [_row(0, "a"), _row(1, "")]
        self.assertEqual(_sent(self.differ.diff(rows, incremental=False)), [0])
        self.assertEqual(_sent(self.differ.diff(rows, incremental=False)), [0])
        # 지문은 계속 갱신되므로 증분 모드로 돌아오면 변경 없음
        self.assertEqual(self.differ.diff(rows, incremental=True), [])

    def test_mode_flags_change_everything(self):
        self.differ.diff(self.rows, incremental=True, mode_flags="advanced")
        result = self.differ.diff(self.rows, incremental=True, mode_flags="simple")
        self.assertEqual(_sent(result), [0, 1, 2])

    def test_karaoke_state_is_part_of_fingerprint(self):
        line = LyricLine(1000, "ab", words=[WordInfo(1000, "a"), WordInfo(1200, "b")])
        inactive = _row(0, "ab", source=line, active=False)
        active = _row(0, "ab", source=line, active=True)
        self.assertNotEqual(fingerprint(inactive), fingerprint(active))

        self.differ.diff([inactive], incremental=True)
        self.assertEqual(_sent(self.differ.diff([active], incremental=True)), [0])

    def test_row_key_is_part_of_fingerprint(self):
        content = _row(0, "x")
        translation = _row(0, "x", RowKind.TRANSLATION, source=content.source)
        self.assertNotEqual(content.key, translation.key)
        self.assertNotEqual(fingerprint(content), fingerprint(translation))

    def test_fewer_rows_keep_stale_slots(self):
        self.differ.diff(self.rows, incremental=True)
        self.differ.diff(self.rows[:1], incremental=True)
        self.assertIn(2, self.differ.fingerprints)
        self.assertEqual(self.differ.diff(self.rows, incremental=True), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)

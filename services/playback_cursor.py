"""
재생 위치 → 현재 가사 줄 인덱스 매핑.
"""

from bisect import bisect_right
from typing import Optional

from core.models import LyricLine


def locate(
    lines: list[LyricLine], position_ms: int, times: Optional[list[int]] = None
) -> Optional[int]:
    """
    time_ms <= position_ms 를 만족하는 마지막 줄의 인덱스 반환.
    가사가 없거나 첫 줄보다 앞이면 None.

    Args:
        times: lines의 time_ms 목록 (미리 계산해 둔 경우)
    """
    if not lines:
        return None
    if times is None:
        times = [line.time_ms for line in lines]
    idx = bisect_right(times, position_ms) - 1
    return idx if idx >= 0 else None


class PlaybackCursor:
    """
    현재 곡의 가사 테이블과 현재 줄 위치를 소유하는 커서.
    매 틱 절대 재생 위치로 다시 계산하므로 틱이 밀려도 다음 틱에서 따라잡습니다.
    """

    def __init__(self) -> None:
        self._lines: list[LyricLine] = []
        self._times: list[int] = []
        self._active_index: Optional[int] = None

    def load(self, lines: list[LyricLine]) -> None:
        """새 가사 테이블 적용 (이전 테이블은 폐기)"""
        self._lines = list(lines)
        self._times = [line.time_ms for line in self._lines]
        self._active_index = None

    def reset(self) -> None:
        self.load([])

    @property
    def lines(self) -> list[LyricLine]:
        return self._lines

    @property
    def active_index(self) -> Optional[int]:
        return self._active_index

    @property
    def current_line(self) -> Optional[LyricLine]:
        if self._active_index is None:
            return None
        return self._lines[self._active_index]

    @property
    def next_line(self) -> Optional[LyricLine]:
        if self._active_index is None:
            return self._lines[0] if self._lines else None
        nxt = self._active_index + 1
        return self._lines[nxt] if nxt < len(self._lines) else None

    def update(self, position_ms: int) -> bool:
        """
        재생 위치로 현재 줄 갱신

        Returns:
            현재 줄 인덱스가 바뀌었으면 True
        """
        new_index = locate(self._lines, position_ms, self._times)
        if new_index != self._active_index:
            self._active_index = new_index
            return True
        return False

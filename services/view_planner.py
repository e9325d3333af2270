"""
현재 줄을 기준으로 하드웨어 화면에 표시할 행 목록을 계획하는 모듈.
"""

from typing import Optional

from core.models import DisplayRow, LyricLine, RowKind


def plan(
    lines: list[LyricLine],
    active_index: Optional[int],
    screen_rows: int,
    offset: int,
    translation_occupies_row: bool,
) -> list[DisplayRow]:
    """
    화면 행 목록 생성

    Args:
        lines: 정렬된 가사 테이블
        active_index: 현재 줄 인덱스 (None이면 아직 시작 전)
        screen_rows: 화면 행 수 (번역이 행을 차지하는 경우 번역 행도 포함)
        offset: 현재 줄 위에 보여줄 줄 수
        translation_occupies_row: 번역 행이 화면 한 칸을 차지하는지 여부.
            False여도 번역 행은 생성되지만 행 수 예산을 소비하지 않습니다.

    Returns:
        표시 순서대로 정렬된 DisplayRow 리스트
    """
    if active_index is None or screen_rows <= 0:
        return []

    rows: list[DisplayRow] = []
    budget_used = 0
    index = active_index - offset

    while index < len(lines) and budget_used < screen_rows:
        if index < 0:
            index += 1
            continue

        line = lines[index]
        is_active = index == active_index
        rows.append(DisplayRow(index, RowKind.CONTENT, line.content, line, is_active))
        budget_used += 1

        if line.translation:
            if not translation_occupies_row:
                rows.append(DisplayRow(index, RowKind.TRANSLATION, line.translation, line, is_active))
            elif budget_used < screen_rows:
                rows.append(DisplayRow(index, RowKind.TRANSLATION, line.translation, line, is_active))
                budget_used += 1

        index += 1

    return rows

"""
물리 행별 지문(fingerprint)을 기억해 바뀐 행만 골라내는 증분 전송 엔진.
"""

from core.models import DisplayRow, RowToSend


def fingerprint(row: DisplayRow, mode_flags: str = "") -> str:
    """행에 보이는 내용이 바뀌면 반드시 달라지는 식별 문자열"""
    logical_index, kind = row.key
    return repr((logical_index, kind.value, mode_flags, row.karaoke, row.text))


class RowDiffer:
    """물리 행 인덱스 → 마지막으로 전송한 지문"""

    def __init__(self) -> None:
        self._fingerprints: dict[int, str] = {}

    def clear(self) -> None:
        """다음 diff에서 모든 행을 변경된 것으로 취급 (곡/세션/레이아웃 변경 시)"""
        self._fingerprints.clear()

    @property
    def fingerprints(self) -> dict[int, str]:
        return dict(self._fingerprints)

    def diff(self, rows: list[DisplayRow], incremental: bool, mode_flags: str = "") -> list[RowToSend]:
        """
        전송할 행 목록 계산

        Args:
            rows: 계획된 화면 행 (리스트 위치 = 물리 행 인덱스)
            incremental: False면 내용이 있는 모든 행을 매번 전송
            mode_flags: 렌더링 모드 (바뀌면 모든 지문이 바뀜)

        Returns:
            전송이 필요한 행 (물리 행 순서)
        """
        to_send: list[RowToSend] = []
        for physical_index, row in enumerate(rows):
            new_fp = fingerprint(row, mode_flags)
            changed = self._fingerprints.get(physical_index) != new_fp
            self._fingerprints[physical_index] = new_fp

            if incremental:
                if changed:
                    to_send.append(RowToSend(physical_index, row))
            elif row.text or row.karaoke:
                to_send.append(RowToSend(physical_index, row))
        return to_send

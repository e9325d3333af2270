"""
시리얼 디스플레이용 바이너리 프레임 인코더.

프레임 구조 (멀티바이트 정수는 모두 리틀 엔디언):
    [0xAA] [cmd:1] [len:1] [payload:len] [checksum:1]

checksum은 헤더를 포함한 앞선 모든 바이트의 XOR입니다.
가사 행 패킷(0x12/0x13/0x14)의 row_index는 가사 테이블의 인덱스(논리 인덱스)입니다.
"""

import struct
from datetime import datetime
from typing import Optional

from core.constants import (
    CMD_LINE,
    CMD_METADATA,
    CMD_SYNC,
    CMD_TIME_SYNC,
    CMD_TRANSLATION,
    CMD_WORD_BY_WORD,
    FRAME_HEADER,
    MAX_PAYLOAD_LEN,
    SUPPORTED_ENCODINGS,
)
from core.models import LyricLine

_U16_MAX = 0xFFFF
_U32_MAX = 0xFFFFFFFF


class PacketError(ValueError):
    """패킷을 만들 수 없는 입력"""


class PayloadTooLongError(PacketError):
    """페이로드 또는 길이 접두 필드가 255바이트 초과"""


class TextEncodingError(PacketError):
    """선택된 인코딩으로 표현할 수 없는 문자"""


def checksum(data: bytes) -> int:
    result = 0
    for b in data:
        result ^= b
    return result


def build_packet(cmd: int, payload: bytes) -> bytes:
    """AA [cmd] [len] [payload] [checksum] 프레임 생성"""
    if len(payload) > MAX_PAYLOAD_LEN:
        raise PayloadTooLongError(f"payload {len(payload)}바이트 > {MAX_PAYLOAD_LEN} (cmd=0x{cmd:02X})")
    frame = bytes([FRAME_HEADER, cmd & 0xFF, len(payload)]) + bytes(payload)
    return frame + bytes([checksum(frame)])


def format_hex(frame: bytes) -> str:
    """'AA 12 03 01 02 03 BB' 형식"""
    return " ".join(f"{b:02X}" for b in frame)


def truncate_to_bytes(text: str, limit: int, encoding: str = "utf-8") -> str:
    """인코딩 결과가 limit 바이트 이하가 되도록 뒤에서부터 문자 단위로 자름"""
    if limit <= 0:
        return ""
    while text and len(text.encode(encoding, errors="replace")) > limit:
        text = text[:-1]
    return text


class PacketEncoder:
    """패킷 빌더 (텍스트 인코딩만 상태로 가짐)"""

    # 행 패킷의 텍스트 최대 바이트 = 255 - row_index(2)
    MAX_LINE_TEXT_BYTES = MAX_PAYLOAD_LEN - 2

    def __init__(self, encoding: str = "utf-8") -> None:
        normalized = encoding.lower().replace("_", "-")
        if normalized == "utf8":
            normalized = "utf-8"
        if normalized not in SUPPORTED_ENCODINGS:
            raise ValueError(f"지원하지 않는 인코딩: {encoding} (가능: {', '.join(SUPPORTED_ENCODINGS)})")
        self.encoding = normalized

    def encode_text(self, text: Optional[str]) -> bytes:
        try:
            return (text or "").encode(self.encoding)
        except UnicodeEncodeError as e:
            raise TextEncodingError(f"{self.encoding}로 인코딩 불가: {text!r}") from e

    # ── 0x10 메타데이터 ───────────────────────────────────────────────────────

    def build_metadata(self, title: str, artist: str, album: str) -> bytes:
        payload = bytearray()
        for value in (title, artist, album):
            payload += self._length_prefixed(self.encode_text(value))
        return build_packet(CMD_METADATA, bytes(payload))

    # ── 0x11 재생 동기 ────────────────────────────────────────────────────────

    def build_sync(self, is_playing: bool, current_ms: int, total_ms: int) -> bytes:
        payload = struct.pack(
            "<BII",
            1 if is_playing else 0,
            _clamp(current_ms, 0, _U32_MAX),
            _clamp(total_ms, 0, _U32_MAX),
        )
        return build_packet(CMD_SYNC, payload)

    # ── 0x12 / 0x13 가사 행 ───────────────────────────────────────────────────

    def build_line(self, row_index: int, text: str) -> bytes:
        return build_packet(CMD_LINE, _pack_row_index(row_index) + self.encode_text(text))

    def build_translation(self, row_index: int, text: str) -> bytes:
        return build_packet(CMD_TRANSLATION, _pack_row_index(row_index) + self.encode_text(text))

    # ── 0x14 逐字 ─────────────────────────────────────────────────────────────

    def build_word_by_word(self, row_index: int, line: LyricLine) -> bytes:
        """단어별 오프셋(줄 시작 기준, 0 이상)과 텍스트"""
        if len(line.words) > 0xFF:
            raise PayloadTooLongError(f"단어 수 {len(line.words)} > 255")

        payload = bytearray(_pack_row_index(row_index) + bytes([len(line.words)]))
        for word in line.words:
            offset = _clamp(word.time_ms - line.time_ms, 0, _U16_MAX)
            payload += struct.pack("<H", offset)
            payload += self._length_prefixed(self.encode_text(word.text))
        return build_packet(CMD_WORD_BY_WORD, bytes(payload))

    # ── 0x20 시계 동기 ────────────────────────────────────────────────────────

    def build_time_sync(self, now: Optional[datetime] = None) -> bytes:
        """하드웨어 RTC 설정: 연(2자리) 월 일 시 분 초 요일(월=1..일=7)"""
        now = now or datetime.now()
        payload = bytes([
            now.year % 100,
            now.month,
            now.day,
            now.hour,
            now.minute,
            now.second,
            now.isoweekday(),
        ])
        return build_packet(CMD_TIME_SYNC, payload)

    # ── 간단 모드 ─────────────────────────────────────────────────────────────

    def build_plain_text(self, text: str) -> bytes:
        """프레임 없이 텍스트 + 개행"""
        return self.encode_text(text + "\n")

    def fit_line_text(self, text: str) -> str:
        """행 패킷에 들어가도록 명시적으로 자른 텍스트"""
        return truncate_to_bytes(text, self.MAX_LINE_TEXT_BYTES, self.encoding)

    # ── 내부 ──────────────────────────────────────────────────────────────────

    @staticmethod
    def _length_prefixed(data: bytes) -> bytes:
        if len(data) > 0xFF:
            raise PayloadTooLongError(f"필드 {len(data)}바이트 > 255")
        return bytes([len(data)]) + data


def _pack_row_index(row_index: int) -> bytes:
    if not -0x8000 <= row_index <= 0x7FFF:
        raise PacketError(f"row_index 범위 초과: {row_index}")
    return struct.pack("<h", row_index)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, int(value)))

"""
앱 전역 상수.
"""

# ── 타이머 ────────────────────────────────────────────────────────────────────

TICK_INTERVAL_MS = 50           # 진행/가사 갱신 주기
SYNC_INTERVAL_TICKS = 10        # 동기 패킷 전송 주기 (틱 단위, 약 500ms)

# ── 가사 ──────────────────────────────────────────────────────────────────────

LYRIC_EXTENSION = ".lrc"
TRANSLATION_MERGE_TOLERANCE_MS = 50

AUDIO_EXTENSIONS = (
    ".mp3", ".flac", ".wav", ".m4a", ".aac", ".ogg",
    ".opus", ".wma", ".ape", ".alac", ".aiff",
)

# 파일명에 쓸 수 없는 문자
ILLEGAL_FILENAME_CHARS = '/\\?:*"<>|'

LYRIC_FILE_ENCODINGS = ("utf-8-sig", "gb18030")

# ── 시리얼 프로토콜 ───────────────────────────────────────────────────────────

FRAME_HEADER = 0xAA
MAX_PAYLOAD_LEN = 0xFF

CMD_METADATA = 0x10
CMD_SYNC = 0x11
CMD_LINE = 0x12
CMD_TRANSLATION = 0x13
CMD_WORD_BY_WORD = 0x14
CMD_TIME_SYNC = 0x20

SUPPORTED_ENCODINGS = ("utf-8", "gb2312")

DEFAULT_BAUD_RATE = 115200

"""
도메인 데이터 클래스 통합 모듈.
가사 테이블, 화면 행, 미디어 세션 스냅샷 데이터 클래스를 한 곳에서 관리합니다.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional


# ── 미디어 세션 ───────────────────────────────────────────────────────────────

@dataclass
class MediaInfo:
    """Windows Media Session에서 가져온 미디어 정보"""
    title: str
    artist: str
    album: str
    source_app: str = "Unknown"     # 재생 중인 앱 (Spotify.exe, chrome.exe 등)


@dataclass
class PlaybackSnapshot:
    """재생 위치/상태 스냅샷"""
    position_ms: int
    duration_ms: int
    status: str                     # "PLAYING", "PAUSED" 등
    is_playing: bool = False

    @property
    def position_str(self) -> str:
        return _format_mmss(self.position_ms)

    @property
    def duration_str(self) -> str:
        return _format_mmss(self.duration_ms)


# ── 트랙 ──────────────────────────────────────────────────────────────────────

@dataclass
class TrackInfo:
    """현재 재생 중인 곡 정보"""
    title: str
    artist: str
    album: str = ""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrackInfo):
            return False
        return self.title == other.title and self.artist == other.artist

    def __hash__(self) -> int:
        return hash((self.title, self.artist))

    @classmethod
    def from_media(cls, media: MediaInfo) -> "TrackInfo":
        return cls(title=media.title, artist=media.artist, album=media.album)


# ── 가사 ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WordInfo:
    """逐字(카라오케) 타이밍 한 단위"""
    time_ms: int
    text: str


@dataclass
class LyricLine:
    """파싱된 가사 한 줄"""
    time_ms: int                            # 곡 시작 기준 오프셋 (밀리초)
    content: str                            # 원문
    translation: Optional[str] = None       # 같은 시각에 붙은 번역 줄
    words: list[WordInfo] = field(default_factory=list)

    @property
    def is_word_timed(self) -> bool:
        return bool(self.words)

    @property
    def timestamp_str(self) -> str:
        """타임스탬프를 MM:SS 형식으로 반환"""
        return _format_mmss(self.time_ms)


# ── 화면 행 ───────────────────────────────────────────────────────────────────

class RowKind(Enum):
    CONTENT = "content"
    TRANSLATION = "translation"


class RowKey(NamedTuple):
    """화면 행 식별자 (가사 인덱스, 행 종류)"""
    logical_index: int
    kind: RowKind


@dataclass(frozen=True)
class DisplayRow:
    """하드웨어 화면 한 칸에 표시할 행 (전송 전 임시 객체)"""
    logical_index: int
    kind: RowKind
    text: str
    source: Optional[LyricLine] = None
    is_active: bool = False

    @property
    def key(self) -> RowKey:
        return RowKey(self.logical_index, self.kind)

    @property
    def karaoke(self) -> bool:
        """현재 줄의 원문 행이면서 逐字 정보가 있는 경우"""
        return (
            self.kind is RowKind.CONTENT
            and self.is_active
            and self.source is not None
            and self.source.is_word_timed
        )


@dataclass(frozen=True)
class RowToSend:
    """변경 감지 결과: 전송이 필요한 물리 행"""
    physical_index: int
    row: DisplayRow


def _format_mmss(ms: int) -> str:
    total_seconds = max(0, ms) // 1000
    return f"{total_seconds // 60:02d}:{total_seconds % 60:02d}"


# ── 미디어 세션 이벤트 ────────────────────────────────────────────────────────

SESSIONS_CHANGED = "sessions_changed"
MEDIA_PROPERTIES_CHANGED = "media_properties_changed"


@dataclass(frozen=True)
class MediaEvent:
    """WinRT 스레드에서 틱 루프로 넘기는 변경 알림"""
    kind: str

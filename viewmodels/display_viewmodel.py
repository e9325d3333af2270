"""
시리얼 디스플레이 ViewModel.
곡 감지 → 가사 로드 → 현재 줄 추적 → 화면 행 계획 → 증분 비교 → 패킷 전송을
하나의 틱 루프에서 순서대로 처리합니다.

책임:
- 현재 트랙/가사 테이블/커서/행 지문 상태 소유 (단일 스레드에서만 변경)
- 미디어 세션 이벤트 큐 처리 (세션 자동 선택, 곡 변경)
- 설정 변경 시 화면 전체 재전송 또는 가사 재검색
- 패킷 인코딩 실패 처리 (명시적 자르기 또는 건너뛰기)
- View에 변경 알림 (콜백 기반)
"""

from typing import Any, Callable, Optional

from core.constants import MAX_PAYLOAD_LEN
from core.logger import get_logger
from core.models import (
    MEDIA_PROPERTIES_CHANGED,
    SESSIONS_CHANGED,
    DisplayRow,
    LyricLine,
    PlaybackSnapshot,
    RowKind,
    TrackInfo,
)
from services.lyrics_parser import LyricsParser
from services.lyrics_resolver import LyricsResolver
from services.packet_encoder import (
    PacketEncoder,
    PacketError,
    PayloadTooLongError,
    TextEncodingError,
    format_hex,
    truncate_to_bytes,
)
from services.playback_cursor import PlaybackCursor
from services.row_differ import RowDiffer
from services.view_planner import plan
from settings.defaults import LAYOUT_KEYS, LYRIC_SOURCE_KEYS
from settings.settings_manager import SettingsManager

logger = get_logger("display_viewmodel")

PreviewCallback = Callable[[str, str, str], None]
FrameCallback = Callable[[str, bytes, str], None]


class DisplayViewModel:
    """
    시리얼 디스플레이 ViewModel.

    media_source: get_sessions / select_session / current_session / describe /
                  drain_events / get_media_info / get_playback 를 제공하는 객체
    transport:    is_open / write / connect / disconnect 를 제공하는 객체
    """

    def __init__(
        self,
        settings: SettingsManager,
        media_source: Any,
        transport: Any,
        lyrics_parser: Optional[LyricsParser] = None,
    ) -> None:
        self._settings = settings
        self._media = media_source
        self._transport = transport
        self._lyrics_parser = lyrics_parser or LyricsParser()

        # ── 상태 변수 ──────────────────────────────────────────────────────────
        self._current_track: Optional[TrackInfo] = None
        self._resolved_path: Optional[str] = None
        self._cursor = PlaybackCursor()
        self._differ = RowDiffer()
        self._encoder = self._make_encoder()
        self._tick_count: int = 0
        self._last_snapshot: Optional[PlaybackSnapshot] = None

        # ── View 콜백 ──────────────────────────────────────────────────────────
        self._on_preview: Optional[PreviewCallback] = None
        self._on_frame: Optional[FrameCallback] = None
        self._on_track_updated: Optional[Callable[[Optional[TrackInfo], Optional[str]], None]] = None

        settings.add_observer(self._on_settings_changed)

    # ── 콜백 등록 ─────────────────────────────────────────────────────────────

    def set_on_preview(self, callback: PreviewCallback) -> None:
        """현재 줄이 바뀔 때: (원문, 번역, 다음 줄)"""
        self._on_preview = callback

    def set_on_frame(self, callback: FrameCallback) -> None:
        """프레임을 만들 때마다: (라벨, 프레임, 원문 텍스트)"""
        self._on_frame = callback

    def set_on_track_updated(self, callback: Callable[[Optional[TrackInfo], Optional[str]], None]) -> None:
        """곡이 바뀌고 가사 검색이 끝났을 때: (트랙 또는 None, 가사 파일 경로 또는 None)"""
        self._on_track_updated = callback

    # ── 상태 조회 ─────────────────────────────────────────────────────────────

    @property
    def current_track(self) -> Optional[TrackInfo]:
        return self._current_track

    @property
    def resolved_path(self) -> Optional[str]:
        return self._resolved_path

    @property
    def lines(self) -> list[LyricLine]:
        return self._cursor.lines

    @property
    def active_index(self) -> Optional[int]:
        return self._cursor.active_index

    def preview_text(self) -> str:
        """화면 미리보기용 '현재 줄 + 번역'"""
        line = self._cursor.current_line
        if line is None:
            return ""
        if line.translation:
            return f"{line.content}\n{line.translation}"
        return line.content

    # ── 시리얼 ────────────────────────────────────────────────────────────────

    def connect(self, port_name: str, baud_rate: int) -> None:
        """
        포트 연결 후 시계/메타데이터 전송, 화면 전체 재전송 예약

        Raises:
            serial.SerialException: 포트를 열 수 없음
        """
        self._encoder = self._make_encoder()
        self._transport.connect(port_name, baud_rate)
        self._differ.clear()
        if self._advanced_mode():
            self._send("시계", self._encoder.build_time_sync(), "")
            self._send_metadata()

    def disconnect(self) -> None:
        self._transport.disconnect()

    # ── 틱 ────────────────────────────────────────────────────────────────────

    def tick(self) -> None:
        """주기 처리 1회 (기본 50ms 간격)"""
        self._process_media_events()

        snapshot = self._media.get_playback()
        self._last_snapshot = snapshot
        if snapshot is None:
            return

        if self._cursor.update(snapshot.position_ms):
            self._notify_preview()

        self._tick_count += 1
        if self._tick_count >= max(1, self._settings.get_int("sync_interval_ticks")):
            self._tick_count = 0
            if self._advanced_mode():
                self._send_sync(snapshot)

        self._process_lyric_window()

    def _process_media_events(self) -> None:
        for event in self._media.drain_events():
            if event.kind == SESSIONS_CHANGED:
                self._handle_sessions_changed()
            elif event.kind == MEDIA_PROPERTIES_CHANGED:
                self._refresh_track()

    def _handle_sessions_changed(self) -> None:
        """선택된 세션이 사라졌으면 첫 세션으로 다시 선택, 세션이 하나도 없으면 화면 비움"""
        sessions = self._media.get_sessions()
        current = self._media.current_session
        logger.debug("세션 목록 변경: %d개", len(sessions))

        if not sessions:
            if current is not None:
                self._media.select_session(None)
            self._clear_track()
        elif current is None or not self._session_alive(current, sessions):
            self._media.select_session(sessions[0])
        self._differ.clear()

    def _session_alive(self, session: Any, sessions: list) -> bool:
        # WinRT는 조회할 때마다 새 래퍼 객체를 돌려주므로 앱 ID로 비교
        session_id = self._media.describe(session)
        return any(self._media.describe(s) == session_id for s in sessions)

    def _refresh_track(self) -> None:
        info = self._media.get_media_info()
        if info is None or not info.title.strip():
            self._clear_track()
            return
        track = TrackInfo.from_media(info)
        if track == self._current_track:
            return
        self.load_track(track)

    # ── 트랙/가사 ─────────────────────────────────────────────────────────────

    def load_track(self, track: TrackInfo) -> None:
        """곡 변경 처리: 가사 테이블 재구성, 화면 전체 재전송, 메타데이터 전송"""
        logger.info("곡 변경 감지: %s - %s", track.title, track.artist)
        self._current_track = track
        self._tick_count = 0
        self._reload_lyrics()

        if self._on_track_updated:
            self._on_track_updated(track, self._resolved_path)
        if self._advanced_mode():
            self._send_metadata()

    def _clear_track(self) -> None:
        """재생 중인 곡이 없을 때: 이전 곡 가사를 버리고 빈 상태로"""
        if self._current_track is None:
            return
        logger.info("재생 중인 곡 없음, 가사 화면 비움")
        self._current_track = None
        self._reload_lyrics()

        if self._on_track_updated:
            self._on_track_updated(None, None)
        if self._advanced_mode():
            self._send("곡 정보", self._encoder.build_metadata("", "", ""), "")

    def _reload_lyrics(self) -> None:
        """현재 트랙의 가사 파일을 다시 찾고 파싱 (이전 테이블은 폐기)"""
        self._differ.clear()
        track = self._current_track
        if track is None:
            self._resolved_path = None
            self._cursor.reset()
            self._notify_preview()
            return

        resolver = LyricsResolver(
            self._settings.get("lyric_folder", ""),
            self._settings.get("filename_patterns"),
        )
        self._resolved_path = resolver.resolve(track.title, track.artist)

        if self._resolved_path:
            logger.info("가사 파일 찾음: %s", self._resolved_path)
            lines = self._lyrics_parser.parse_file(self._resolved_path)
        else:
            logger.info("가사 파일 없음: %s - %s", track.title, track.artist)
            lines = []

        self._cursor.load(lines)
        if self._last_snapshot is not None:
            self._cursor.update(self._last_snapshot.position_ms)
        self._notify_preview()

    # ── 화면 창 처리 ──────────────────────────────────────────────────────────

    def plan_rows(self) -> list[DisplayRow]:
        """현재 설정으로 계획한 화면 행 (전송 정책 필터 적용)"""
        occupies = self._settings.get_bool("translation_occupies_row")
        rows = plan(
            self._cursor.lines,
            self._cursor.active_index,
            self._settings.get_int("screen_lines"),
            self._settings.get_int("line_offset"),
            occupies,
        )
        if not occupies and not self._settings.get_bool("send_overlay_translations"):
            rows = [row for row in rows if row.kind is RowKind.CONTENT]
        return rows

    def _process_lyric_window(self) -> None:
        advanced = self._advanced_mode()
        rows = self.plan_rows()
        changed = self._differ.diff(
            rows,
            incremental=self._settings.get_bool("incremental"),
            mode_flags="advanced" if advanced else "simple",
        )

        for item in changed:
            row = item.row
            frame = self._encode_row(row, advanced)
            if frame is None:
                continue
            label = f"Row {item.physical_index}" if advanced else "간단 모드"
            self._send(label, frame, row.text)

    def _encode_row(self, row: DisplayRow, advanced: bool) -> Optional[bytes]:
        """행 → 프레임. 인코딩할 수 없으면 None (지문은 유지되어 매 틱 재시도하지 않음)"""
        try:
            if not advanced:
                return self._encoder.build_plain_text(row.text)
            if row.karaoke:
                return self._encoder.build_word_by_word(row.logical_index, row.source)
            return self._build_row_packet(row, row.text)

        except PayloadTooLongError as e:
            if not self._settings.get_bool("truncate_long_lines"):
                logger.warning("행 전송 생략 (길이 초과): %s", e)
                return None
            fitted = self._encoder.fit_line_text(row.text)
            logger.debug("행 텍스트 자름: %r → %r", row.text, fitted)
            try:
                return self._build_row_packet(row, fitted)
            except PacketError as retry_error:
                logger.warning("행 전송 생략: %s", retry_error)
                return None

        except TextEncodingError as e:
            logger.warning("행 전송 생략 (인코딩 불가): %s", e)
            return None

        except PacketError as e:
            logger.warning("행 전송 생략: %s", e)
            return None

    def _build_row_packet(self, row: DisplayRow, text: str) -> bytes:
        if row.kind is RowKind.TRANSLATION:
            return self._encoder.build_translation(row.logical_index, text)
        return self._encoder.build_line(row.logical_index, text)

    # ── 전송 ──────────────────────────────────────────────────────────────────

    def _send_metadata(self) -> None:
        track = self._current_track
        if track is None:
            return

        fields = [track.title, track.artist, track.album]
        if self._settings.get_bool("truncate_long_lines"):
            # 각 필드는 1바이트 길이 접두 + 본문, 세 필드 합이 255를 넘지 않도록 자름
            per_field = (MAX_PAYLOAD_LEN - 3) // 3
            fields = [truncate_to_bytes(value, per_field, self._encoder.encoding) for value in fields]

        try:
            frame = self._encoder.build_metadata(*fields)
        except PacketError as e:
            logger.warning("메타데이터 전송 생략: %s", e)
            return
        self._send("곡 정보", frame, track.title)

    def _send_sync(self, snapshot: PlaybackSnapshot) -> None:
        frame = self._encoder.build_sync(snapshot.is_playing, snapshot.position_ms, snapshot.duration_ms)
        self._send("동기", frame, f"{snapshot.position_str} / {snapshot.duration_str}")

    def _send(self, label: str, frame: bytes, text: str) -> None:
        if self._on_frame:
            self._on_frame(label, frame, text)
        if not self._transport.is_open:
            return
        logger.debug("[%s] %s | %s", label, text, format_hex(frame))
        self._transport.write(frame)

    # ── 설정 변경 ─────────────────────────────────────────────────────────────

    def _on_settings_changed(self, settings: dict, changed: dict) -> None:
        if "text_encoding" in changed:
            self._encoder = self._make_encoder()

        if any(key in changed for key in LYRIC_SOURCE_KEYS) and self._current_track:
            logger.info("가사 폴더/패턴 변경, 가사 재검색")
            self._reload_lyrics()
        elif any(key in changed for key in LAYOUT_KEYS):
            self._differ.clear()

    def _make_encoder(self) -> PacketEncoder:
        encoding = self._settings.get("text_encoding", "utf-8")
        try:
            return PacketEncoder(encoding)
        except ValueError as e:
            logger.warning("%s, utf-8 사용", e)
            return PacketEncoder("utf-8")

    def _advanced_mode(self) -> bool:
        return self._settings.get_bool("advanced_mode")

    def _notify_preview(self) -> None:
        if not self._on_preview:
            return
        current = self._cursor.current_line
        nxt = self._cursor.next_line
        self._on_preview(
            current.content if current else "",
            (current.translation or "") if current else "",
            nxt.content if nxt else "",
        )

"""
Windows Media Session API를 사용하여 재생 중인 미디어 정보를 가져옵니다.

WinRT 이벤트 핸들러는 별도 스레드에서 호출되므로 상태를 직접 건드리지 않고
큐에 이벤트만 넣습니다. 틱 루프가 drain_events()로 꺼내 단일 스레드에서 처리합니다.
"""

import asyncio
import queue
from datetime import datetime, timezone
from typing import Any, Optional

from winsdk.windows.media.control import (
    GlobalSystemMediaTransportControlsSessionManager as MediaManager,
    GlobalSystemMediaTransportControlsSessionPlaybackStatus as PlaybackStatus,
)

from core.logger import get_logger
from core.models import (
    MEDIA_PROPERTIES_CHANGED,
    SESSIONS_CHANGED,
    MediaEvent,
    MediaInfo,
    PlaybackSnapshot,
)

logger = get_logger("media_session")


def _status_name(status: Any) -> str:
    name = getattr(status, "name", None)
    return name if name else str(status)


def calculate_position_ms(session) -> int:
    """세션 정보를 바탕으로 현재 재생 위치 계산 (재생 중이면 경과 시간 × 재생 속도 보정)"""
    timeline = session.get_timeline_properties()
    playback_info = session.get_playback_info()

    position = int(timeline.position.total_seconds() * 1000)

    if playback_info.playback_status == PlaybackStatus.PLAYING:
        last_updated = getattr(timeline, "last_updated_time", None)
        if last_updated:
            now = datetime.now(timezone.utc)
            diff = (now - last_updated).total_seconds()
            if diff > 0:
                rate = playback_info.playback_rate or 1.0
                position += int(diff * 1000 * rate)

    return position


class MediaSessionMonitor:
    """미디어 세션 선택/조회 및 변경 알림 큐"""

    def __init__(self) -> None:
        self._loop = asyncio.new_event_loop()
        self._manager = None
        self._session = None
        self._events: "queue.Queue[MediaEvent]" = queue.Queue()
        self._sessions_token = None
        self._properties_token = None

    # ── 수명 주기 ─────────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """세션 매니저 요청 및 세션 목록 변경 구독"""
        self._manager = self._run(MediaManager.request_async())
        self._sessions_token = self._manager.add_sessions_changed(self._on_sessions_changed)
        self._events.put(MediaEvent(SESSIONS_CHANGED))
        logger.info("미디어 세션 매니저 초기화 완료")

    def close(self) -> None:
        self.select_session(None)
        if self._manager is not None and self._sessions_token is not None:
            self._manager.remove_sessions_changed(self._sessions_token)
            self._sessions_token = None
        if not self._loop.is_closed():
            self._loop.close()

    def _run(self, awaitable):
        return self._loop.run_until_complete(awaitable)

    # ── 세션 ──────────────────────────────────────────────────────────────────

    def get_sessions(self) -> list:
        if self._manager is None:
            return []
        return list(self._manager.get_sessions())

    @property
    def current_session(self):
        """선택된 세션 (없으면 None)"""
        return self._session

    @staticmethod
    def describe(session) -> str:
        return getattr(session, "source_app_user_model_id", None) or "Unknown"

    def select_session(self, session) -> None:
        """세션 전환: 이전 세션 구독 해제 후 새 세션 구독, 즉시 한 번 변경 알림"""
        if self._session is not None and self._properties_token is not None:
            self._session.remove_media_properties_changed(self._properties_token)
            self._properties_token = None

        self._session = session
        if session is not None:
            self._properties_token = session.add_media_properties_changed(self._on_media_properties_changed)
            self._events.put(MediaEvent(MEDIA_PROPERTIES_CHANGED))
            logger.info("세션 선택: %s", self.describe(session))

    # ── WinRT 이벤트 핸들러 (다른 스레드) ─────────────────────────────────────

    def _on_sessions_changed(self, sender, args) -> None:
        self._events.put(MediaEvent(SESSIONS_CHANGED))

    def _on_media_properties_changed(self, sender, args) -> None:
        self._events.put(MediaEvent(MEDIA_PROPERTIES_CHANGED))

    def drain_events(self) -> list[MediaEvent]:
        events: list[MediaEvent] = []
        while True:
            try:
                events.append(self._events.get_nowait())
            except queue.Empty:
                return events

    # ── 조회 ──────────────────────────────────────────────────────────────────

    def get_media_info(self) -> Optional[MediaInfo]:
        """현재 세션의 제목/아티스트/앨범"""
        if self._session is None:
            return None
        try:
            props = self._run(self._session.try_get_media_properties_async())
        except OSError as e:
            logger.warning("미디어 속성 조회 실패: %s", e)
            return None
        if props is None:
            return None
        return MediaInfo(
            title=props.title or "",
            artist=props.artist or "",
            album=props.album_title or "",
            source_app=self.describe(self._session),
        )

    def get_playback(self) -> Optional[PlaybackSnapshot]:
        """재생 위치/길이/상태 스냅샷"""
        if self._session is None:
            return None
        try:
            timeline = self._session.get_timeline_properties()
            playback_info = self._session.get_playback_info()
            status = playback_info.playback_status
            return PlaybackSnapshot(
                position_ms=calculate_position_ms(self._session),
                duration_ms=int(timeline.end_time.total_seconds() * 1000),
                status=_status_name(status),
                is_playing=status == PlaybackStatus.PLAYING,
            )
        except OSError:
            # 세션이 사라진 직후 등. 빈번한 호출이므로 로그 생략
            return None

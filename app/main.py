"""
앱 조립 및 실행 진입점.
모든 레이어를 조립하고 고정 주기 틱 루프를 시작합니다.
이 파일은 앱의 의존성 주입(DI) 역할을 담당합니다.
"""

import os
import sys
from typing import Optional

# 프로젝트 루트를 sys.path에 추가 (패키지 임포트 지원)
_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _ROOT not in sys.path:
    sys.path.insert(0, _ROOT)

import serial

from app.tick_loop import run_tick_loop
from core.logger import enable_file_logging, get_logger
from core.models import TrackInfo
from services.lyrics_parser import LyricsParser
from services.media_session import MediaSessionMonitor
from services.serial_transport import SerialTransport
from settings.settings_manager import SettingsManager
from viewmodels.display_viewmodel import DisplayViewModel

logger = get_logger("app")


def create_and_run(settings_path: str = "settings.json") -> None:
    """앱 생성 및 실행 (의존성 주입)"""

    # ── 1. 설정/로그 ───────────────────────────────────────────────────────────
    settings = SettingsManager(settings_path)
    log_path = enable_file_logging(os.path.join(os.path.dirname(settings.filepath), "logs"))
    logger.info("로그 파일: %s", log_path)

    # ── 2. 서비스 레이어 생성 ──────────────────────────────────────────────────
    media = MediaSessionMonitor()
    transport = SerialTransport()
    lyrics_parser = LyricsParser()

    # ── 3. ViewModel 생성 및 콜백 연결 ────────────────────────────────────────
    viewmodel = DisplayViewModel(
        settings=settings,
        media_source=media,
        transport=transport,
        lyrics_parser=lyrics_parser,
    )
    viewmodel.set_on_preview(_on_preview)
    viewmodel.set_on_track_updated(_on_track_updated)

    # ── 4. 시리얼 연결 ─────────────────────────────────────────────────────────
    _connect_serial(viewmodel, settings, transport)

    # ── 5. 미디어 세션 구독 ────────────────────────────────────────────────────
    media.initialize()

    # ── 6. 틱 루프 실행 ────────────────────────────────────────────────────────
    try:
        run_tick_loop(viewmodel.tick, settings.get_int("tick_interval_ms"))
    except KeyboardInterrupt:
        logger.info("종료 요청")
    finally:
        _on_close(viewmodel, media)


def _connect_serial(viewmodel: DisplayViewModel, settings: SettingsManager, transport: SerialTransport) -> None:
    port_name = settings.get("port_name", "")
    if not port_name:
        logger.warning("port_name 미설정. 사용 가능한 포트: %s", ", ".join(transport.list_ports()) or "없음")
        return
    try:
        viewmodel.connect(port_name, settings.get_int("baud_rate"))
    except serial.SerialException as e:
        logger.error("시리얼 연결 실패: %s (%s)", port_name, e)


def _on_preview(current: str, translation: str, next_text: str) -> None:
    if not current and not next_text:
        return
    logger.info("♪ %s%s", current, f" / {translation}" if translation else "")


def _on_track_updated(track: Optional[TrackInfo], lyric_path) -> None:
    if track is None:
        return
    if lyric_path:
        logger.info("찾음: %s", os.path.basename(lyric_path))
    else:
        logger.info("가사 파일을 찾지 못했습니다: %s - %s", track.title, track.artist)


def _on_close(viewmodel: DisplayViewModel, media: MediaSessionMonitor) -> None:
    """앱 종료 처리"""
    viewmodel.disconnect()
    media.close()

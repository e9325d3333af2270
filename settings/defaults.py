"""
기본 설정값 상수.
SettingsManager 클래스 내부에서 분리하여 독립적으로 관리합니다.
"""

from typing import Any

from core.constants import DEFAULT_BAUD_RATE, SYNC_INTERVAL_TICKS, TICK_INTERVAL_MS

DEFAULT_SETTINGS: dict[str, Any] = {
    # 시리얼
    "port_name": "",
    "baud_rate": DEFAULT_BAUD_RATE,
    "text_encoding": "utf-8",           # "utf-8" 또는 "gb2312"
    # 가사 파일
    "lyric_folder": r"C:\Lyrics",
    "filename_patterns": ["{Artist} - {Title}", "{Title} - {Artist}", "{Title}"],
    # 화면 레이아웃
    "screen_lines": 3,
    "line_offset": 1,
    "advanced_mode": True,
    "incremental": True,
    "translation_occupies_row": True,
    "send_overlay_translations": True,  # 번역이 행을 차지하지 않을 때도 전송할지
    "truncate_long_lines": True,
    # 타이머
    "tick_interval_ms": TICK_INTERVAL_MS,
    "sync_interval_ticks": SYNC_INTERVAL_TICKS,
}

# 바뀌면 하드웨어 화면 전체를 다시 보내야 하는 키
LAYOUT_KEYS = (
    "advanced_mode",
    "incremental",
    "translation_occupies_row",
    "send_overlay_translations",
    "screen_lines",
    "line_offset",
    "text_encoding",
)

# 바뀌면 현재 곡 가사를 다시 찾아야 하는 키
LYRIC_SOURCE_KEYS = ("lyric_folder", "filename_patterns")

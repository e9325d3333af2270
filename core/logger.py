"""
로그 모듈 - 모든 모듈에 통일된 로그 포맷을 제공합니다.

각 모듈은 get_logger()로 자신의 logger를 받아 사용합니다.
파일 로그는 앱 진입점에서 enable_file_logging()을 호출했을 때만 기록됩니다.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

_ROOT_NAME = "lyric_display"

# 로그 포맷: 시간 | 등급 | 모듈명 | 메시지
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        root.setLevel(logging.DEBUG)
        root.propagate = False

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(console_handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """
    모듈별 Logger 반환.

    Args:
        name: 모듈 이름 (예: 'lyrics_parser', 'serial_transport')

    Returns:
        'lyric_display.<name>' 이름의 Logger
    """
    _root_logger()
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def set_console_level(level: int) -> None:
    """콘솔 출력 레벨 변경 (패킷 HEX 로그는 DEBUG)"""
    for handler in _root_logger().handlers:
        if not isinstance(handler, RotatingFileHandler):
            handler.setLevel(level)


def enable_file_logging(log_dir: str, filename: str = "lyric_display.log") -> str:
    """
    파일 로그 활성화. 단일 파일 최대 5MB, 백업 3개.

    Returns:
        로그 파일 경로
    """
    root = _root_logger()
    os.makedirs(log_dir, exist_ok=True)
    file_path = os.path.join(log_dir, filename)

    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == os.path.abspath(file_path):
            return file_path

    file_handler = RotatingFileHandler(
        file_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(file_handler)
    return file_path

"""
설정 관리 클래스.
Observer 패턴으로 설정 변경 시 등록된 콜백에 자동 알림합니다.
기본값은 settings/defaults.py에서 임포트합니다.
"""

import json
import os
import sys
from typing import Any, Callable, Dict, List

from core.logger import get_logger
from settings.defaults import DEFAULT_SETTINGS

logger = get_logger("settings")

SettingsObserver = Callable[[Dict[str, Any], Dict[str, Any]], None]


class SettingsManager:
    """설정 관리 클래스 (Observer Pattern)"""

    def __init__(self, filepath: str = "settings.json") -> None:
        # PyInstaller 환경 지원: exe 실행 시 실행 파일 위치 기준
        if os.path.isabs(filepath):
            self.filepath = filepath
        else:
            if getattr(sys, "frozen", False):
                base_path = os.path.dirname(sys.executable)
            else:
                base_path = os.getcwd()
            self.filepath = os.path.join(base_path, filepath)

        self._settings: Dict[str, Any] = json.loads(json.dumps(DEFAULT_SETTINGS))
        self._observers: List[SettingsObserver] = []
        self._load()

    # ── 파일 I/O ──────────────────────────────────────────────────────────────

    def _load(self) -> None:
        """설정 파일 로드 (누락된 키는 기본값으로 보완)"""
        if not os.path.exists(self.filepath):
            return
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                loaded: Dict[str, Any] = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("설정 로드 실패, 기본값 사용: %s", e)
            return

        if not isinstance(loaded, dict):
            logger.warning("설정 파일 형식 오류, 기본값 사용: %s", self.filepath)
            return
        self._settings.update(loaded)

    def save(self) -> None:
        """설정 파일 저장"""
        try:
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.warning("설정 저장 실패: %s", e)

    # ── 공개 API ──────────────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        """설정값 조회"""
        return self._settings.get(key, default)

    def get_int(self, key: str) -> int:
        """정수 설정값 (잘못된 값이면 기본값)"""
        value = self._settings.get(key)
        try:
            return int(value)
        except (TypeError, ValueError):
            return int(DEFAULT_SETTINGS[key])

    def get_bool(self, key: str) -> bool:
        value = self._settings.get(key, DEFAULT_SETTINGS.get(key))
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def get_all(self) -> Dict[str, Any]:
        """모든 설정 복사본 반환"""
        return self._settings.copy()

    def set(self, key: str, value: Any) -> None:
        """단일 설정값 변경 및 저장"""
        self.update({key: value})

    def update(self, new_settings: Dict[str, Any]) -> None:
        """여러 설정값 일괄 업데이트 및 저장. 실제로 바뀐 키만 옵저버에 전달"""
        changed = {k: v for k, v in new_settings.items() if self._settings.get(k) != v}
        if not changed:
            return
        self._settings.update(changed)
        self.save()
        self._notify_observers(changed)

    # ── Observer 관리 ─────────────────────────────────────────────────────────

    def add_observer(self, callback: SettingsObserver) -> None:
        """옵저버 등록. 콜백 인자: (전체 설정 복사본, 바뀐 키만 담은 dict)"""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: SettingsObserver) -> None:
        """옵저버 제거"""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self, changed: Dict[str, Any]) -> None:
        """등록된 옵저버들에게 설정 변경 알림"""
        settings_copy = self._settings.copy()
        for callback in self._observers:
            try:
                callback(settings_copy, dict(changed))
            except Exception:
                logger.exception("옵저버 알림 실패")

"""
로컬 가사 폴더에서 (제목, 아티스트)에 맞는 LRC 파일을 찾는 모듈.
파일명 패턴 일치를 먼저 시도하고, 실패하면 부분 문자열 기반 퍼지 매칭을 사용합니다.
"""

import os
import re
from typing import Iterable, Optional, Union

from core.constants import AUDIO_EXTENSIONS, ILLEGAL_FILENAME_CHARS, LYRIC_EXTENSION
from core.logger import get_logger

logger = get_logger("lyrics_resolver")

_ILLEGAL_PATTERN = re.compile("[" + re.escape(ILLEGAL_FILENAME_CHARS) + "]")

# 끝에 붙은 (Live), [Remastered], （伴奏）, 【MV】 등
_SUFFIX_PATTERN = re.compile(r"\s*(?:\([^()]*\)|\[[^\[\]]*\]|（[^（）]*）|【[^【】]*】)\s*$")

_WHITESPACE = re.compile(r"\s+")


def sanitize_filename(text: str) -> str:
    """파일명에 쓸 수 없는 문자를 '_'로 치환"""
    return _ILLEGAL_PATTERN.sub("_", text or "")


def clean_title(title: str) -> str:
    """
    검색용 정제 제목 생성.

    - 끝의 오디오 확장자 제거 ("song.mp3" → "song")
    - 끝의 괄호 접미사 제거 ("Song (Live) [2020]" → "Song")
    """
    cleaned = title.strip()
    lowered = cleaned.lower()
    for ext in AUDIO_EXTENSIONS:
        if lowered.endswith(ext):
            cleaned = cleaned[: -len(ext)].strip()
            break

    while True:
        stripped = _SUFFIX_PATTERN.sub("", cleaned)
        if stripped == cleaned or not stripped:
            break
        cleaned = stripped
    return cleaned.strip()


def split_patterns(patterns: Union[str, Iterable[str], None]) -> list[str]:
    """';' 구분 문자열 또는 리스트를 패턴 리스트로 정규화"""
    if patterns is None:
        return []
    if isinstance(patterns, str):
        patterns = patterns.split(";")
    return [p.strip() for p in patterns if p and p.strip()]


def _normalize(name: str) -> str:
    """대소문자/공백 무시 비교용 키"""
    return _WHITESPACE.sub("", name).casefold()


class LyricsResolver:
    """가사 파일 탐색기"""

    def __init__(self, folder: str, patterns: Union[str, Iterable[str], None] = None) -> None:
        """
        Args:
            folder: 가사 폴더 (하위 폴더는 탐색하지 않음)
            patterns: 파일명 패턴 목록 ({Artist}, {Title} 토큰)
        """
        self.folder = folder
        self.patterns = split_patterns(patterns)

    def resolve(self, title: str, artist: str) -> Optional[str]:
        """
        가사 파일 경로 반환

        Returns:
            찾은 파일의 전체 경로, 없으면 None
        """
        if not self.folder or not os.path.isdir(self.folder):
            logger.debug("가사 폴더 없음: %s", self.folder)
            return None
        if not title or not title.strip():
            return None

        safe_title = sanitize_filename(title.strip())
        safe_artist = sanitize_filename((artist or "").strip())
        cleaned = clean_title(safe_title)

        files = self._list_lyric_files()
        if not files:
            return None

        return (
            self._match_patterns(files, cleaned, safe_title, safe_artist)
            or self._match_fuzzy(files, cleaned or safe_title, safe_artist)
        )

    # ── 내부 ──────────────────────────────────────────────────────────────────

    def _list_lyric_files(self) -> list[str]:
        try:
            names = sorted(os.listdir(self.folder))
        except OSError as e:
            logger.warning("가사 폴더 읽기 실패: %s (%s)", self.folder, e)
            return []
        return [
            name for name in names
            if name.lower().endswith(LYRIC_EXTENSION)
            and os.path.isfile(os.path.join(self.folder, name))
        ]

    def _match_patterns(
        self, files: list[str], cleaned: str, safe_title: str, safe_artist: str
    ) -> Optional[str]:
        normalized = {}
        for name in files:
            normalized.setdefault(_normalize(name), name)

        titles = [t for t in dict.fromkeys([cleaned, safe_title]) if t]
        for pattern in self.patterns:
            for candidate_title in titles:
                target = (
                    pattern.replace("{Artist}", safe_artist).replace("{Title}", candidate_title)
                    + LYRIC_EXTENSION
                )
                match = normalized.get(_normalize(target))
                if match:
                    logger.debug("패턴 일치: '%s' → %s", pattern, match)
                    return os.path.join(self.folder, match)
        return None

    def _match_fuzzy(self, files: list[str], title_needle: str, artist_needle: str) -> Optional[str]:
        title_key = title_needle.strip().casefold()
        if not title_key:
            return None
        artist_key = artist_needle.strip().casefold()

        stems = [(os.path.splitext(name)[0].casefold(), name) for name in files]

        if artist_key:
            for stem, name in stems:
                if title_key in stem and artist_key in stem:
                    logger.debug("퍼지 일치 (제목+아티스트): %s", name)
                    return os.path.join(self.folder, name)

        for stem, name in stems:
            if title_key in stem:
                logger.debug("퍼지 일치 (제목): %s", name)
                return os.path.join(self.folder, name)
        return None

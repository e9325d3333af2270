"""
LRC 형식의 가사를 파싱하는 모듈.
타임스탬프 추출, 逐字(카라오케) 태그 해석, 동일 시각 번역 줄 병합을 담당합니다.
"""

import re
from typing import Optional

from core.constants import LYRIC_FILE_ENCODINGS, TRANSLATION_MERGE_TOLERANCE_MS
from core.logger import get_logger
from core.models import LyricLine, WordInfo

logger = get_logger("lyrics_parser")

_TIME = r"\d{1,3}:\d{2}(?:\.\d{1,3})?"


class LyricsParser:
    """LRC 가사 파서"""

    # [MM:SS.xx]본문 또는 <MM:SS.xx>본문
    _LINE_PATTERN = re.compile(rf"^(?:\[(?P<bracket>{_TIME})\]|<(?P<angle>{_TIME})>)(?P<body>.*)$")

    # 본문 안의 <MM:SS.xx>단어
    _WORD_PATTERN = re.compile(rf"<({_TIME})>([^<]*)")

    def __init__(self, merge_tolerance_ms: int = TRANSLATION_MERGE_TOLERANCE_MS) -> None:
        """
        Args:
            merge_tolerance_ms: 이 간격 이내의 줄은 앞 줄의 번역으로 취급
        """
        self.merge_tolerance_ms = merge_tolerance_ms

    def parse_file(self, path: Optional[str]) -> list[LyricLine]:
        """가사 파일을 읽어 파싱. 읽을 수 없으면 빈 리스트"""
        if not path:
            return []

        text = self._read_text(path)
        if text is None:
            return []

        lines = self.parse(text)
        logger.info("가사 파싱 완료: %d줄 (%s)", len(lines), path)
        return lines

    def parse(self, lyrics_text: str) -> list[LyricLine]:
        """
        가사 텍스트를 파싱하여 LyricLine 리스트 반환

        Args:
            lyrics_text: LRC 형식 텍스트

        Returns:
            타임스탬프 기준 정렬된 LyricLine 리스트 (같은 시각은 파일 순서 유지)
        """
        if not lyrics_text:
            return []

        lines: list[LyricLine] = []
        for raw_line in lyrics_text.splitlines():
            try:
                self._parse_line(raw_line, lines)
            except (ValueError, IndexError) as e:
                logger.debug("줄 건너뜀 (%s): %r", e, raw_line)

        # sort()는 안정 정렬이므로 같은 시각의 줄은 입력 순서 유지
        lines.sort(key=lambda line: line.time_ms)
        return lines

    # ── 내부 ──────────────────────────────────────────────────────────────────

    def _read_text(self, path: str) -> Optional[str]:
        for encoding in LYRIC_FILE_ENCODINGS:
            try:
                with open(path, "r", encoding=encoding) as f:
                    return f.read()
            except UnicodeDecodeError:
                continue
            except OSError as e:
                logger.warning("가사 파일 읽기 실패: %s (%s)", path, e)
                return None
        logger.warning("가사 파일 인코딩 판별 실패: %s", path)
        return None

    def _parse_line(self, raw_line: str, lines: list[LyricLine]) -> None:
        """단일 줄을 파싱해 lines에 추가하거나 기존 줄의 번역으로 병합"""
        match = self._LINE_PATTERN.match(raw_line.strip())
        if not match:
            return

        time_ms = parse_timestamp(match.group("bracket") or match.group("angle"))
        body = match.group("body").strip()
        words = self._parse_words(body, time_ms)

        if not words:
            existing = self._find_merge_target(lines, time_ms)
            if existing is not None:
                # 빈 줄이 기존 번역을 지우지 않도록
                if body or existing.translation is None:
                    existing.translation = body
                return
            lines.append(LyricLine(time_ms=time_ms, content=body))
            return

        content = "".join(word.text for word in words)
        lines.append(LyricLine(time_ms=time_ms, content=content, words=words))

    def _parse_words(self, body: str, line_time_ms: int) -> list[WordInfo]:
        matches = list(self._WORD_PATTERN.finditer(body))
        if not matches:
            return []

        words: list[WordInfo] = []

        # 첫 태그 앞 텍스트는 줄 시작 시각의 단어로 보존 (첫 음절 유실 방지)
        prefix = body[: matches[0].start()]
        if prefix:
            words.append(WordInfo(time_ms=line_time_ms, text=prefix))

        for m in matches:
            words.append(WordInfo(time_ms=parse_timestamp(m.group(1)), text=m.group(2)))
        return words

    def _find_merge_target(self, lines: list[LyricLine], time_ms: int) -> Optional[LyricLine]:
        for line in lines:
            if abs(line.time_ms - time_ms) <= self.merge_tolerance_ms:
                return line
        return None


def parse_timestamp(value: str) -> int:
    """
    'MM:SS' / 'MM:SS.f' / 'MM:SS.ff' / 'MM:SS.fff' → 밀리초.
    항상 1시간 미만으로 해석하므로 분/초가 60 이상이면 ValueError.
    """
    minutes_str, seconds_str = value.split(":")
    if "." in seconds_str:
        seconds_str, fraction = seconds_str.split(".")
    else:
        fraction = ""

    minutes = int(minutes_str)
    seconds = int(seconds_str)
    if minutes >= 60 or seconds >= 60:
        raise ValueError(f"시간 범위 초과: {value}")

    # 1자리 = 1/10초, 2자리 = 1/100초, 3자리 = 밀리초
    millis = int(fraction.ljust(3, "0")) if fraction else 0
    return (minutes * 60 + seconds) * 1000 + millis


def format_timestamp(time_ms: int) -> str:
    """밀리초 → 'MM:SS.fff'"""
    time_ms = max(0, time_ms)
    total_seconds, millis = divmod(time_ms, 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


def to_lrc(lines: list[LyricLine]) -> str:
    """LyricLine 리스트를 LRC 텍스트로 직렬화 (번역은 같은 시각의 다음 줄)"""
    out: list[str] = []
    for line in lines:
        stamp = f"[{format_timestamp(line.time_ms)}]"
        if line.words:
            body = "".join(f"<{format_timestamp(w.time_ms)}>{w.text}" for w in line.words)
        else:
            body = line.content
        out.append(stamp + body)
        if line.translation is not None:
            out.append(stamp + line.translation)
    return "\n".join(out)

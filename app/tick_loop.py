"""
고정 주기 틱 루프.
"""

import time
from typing import Callable

from core.logger import get_logger

logger = get_logger("tick_loop")


def run_tick_loop(
    tick: Callable[[], None],
    interval_ms: int,
    should_continue: Callable[[], bool] = lambda: True,
) -> None:
    """
    고정 주기로 tick 호출. 틱이 밀리면 누적하지 않고 다음 주기부터 다시 맞춥니다.
    틱 내부 예외는 기록만 하고 루프는 계속 돕니다.
    """
    interval = max(1, interval_ms) / 1000.0
    next_tick = time.monotonic()

    while should_continue():
        try:
            tick()
        except Exception:
            logger.exception("틱 처리 오류")

        next_tick += interval
        delay = next_tick - time.monotonic()
        if delay > 0:
            time.sleep(delay)
        else:
            next_tick = time.monotonic()

"""
시리얼 가사 디스플레이
메인 진입점 - 재생 중인 곡의 가사를 시리얼 디스플레이로 전송합니다.
"""

import sys

from app.main import create_and_run


if __name__ == "__main__":
    create_and_run(*sys.argv[1:2])

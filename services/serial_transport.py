"""
pyserial 기반 시리얼 포트 송신기.
전송은 best-effort: 포트가 닫혀 있거나 쓰기에 실패하면 로그만 남기고 넘어갑니다.
"""

from typing import Optional

import serial
from serial.tools import list_ports

from core.constants import DEFAULT_BAUD_RATE
from core.logger import get_logger

logger = get_logger("serial_transport")


class SerialTransport:
    """시리얼 포트 송신기"""

    def __init__(self, write_timeout: float = 0.2) -> None:
        self._port = serial.Serial()
        self._port.write_timeout = write_timeout

    @staticmethod
    def list_ports() -> list[str]:
        """사용 가능한 포트 이름 목록 (COM3, /dev/ttyUSB0 등)"""
        return sorted(info.device for info in list_ports.comports())

    @property
    def is_open(self) -> bool:
        return self._port.is_open

    @property
    def port_name(self) -> Optional[str]:
        return self._port.port

    def connect(self, port_name: str, baud_rate: int = DEFAULT_BAUD_RATE) -> None:
        """
        포트 열기 (이미 열려 있으면 닫고 다시 열기)

        Raises:
            serial.SerialException: 포트를 열 수 없음
        """
        if self._port.is_open:
            self._port.close()
        self._port.port = port_name
        self._port.baudrate = int(baud_rate)
        self._port.open()
        logger.info("시리얼 연결: %s @ %d", port_name, int(baud_rate))

    def disconnect(self) -> None:
        if self._port.is_open:
            self._port.close()
            logger.info("시리얼 연결 해제: %s", self._port.port)

    def write(self, data: bytes) -> bool:
        """
        원시 바이트 전송

        Returns:
            실제로 전송했으면 True
        """
        if not self._port.is_open:
            return False
        try:
            self._port.write(data)
            return True
        except serial.SerialException as e:
            logger.warning("시리얼 전송 실패 (%d바이트): %s", len(data), e)
            return False

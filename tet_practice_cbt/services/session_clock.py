"""
services/session_clock.py

응시 화면이 보이는 동안 1초마다 tick을 보내는 시계.

실행 중인 asyncio 이벤트 루프 위의 태스크로 동작하므로 tick 콜백은
다른 전이와 같은 스레드에서 순서대로 실행된다. 화면이 숨겨지거나
세션이 끝나면 stop()으로 반드시 취소한다.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class SessionClock:
    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0) -> None:
        if interval <= 0:
            raise ValueError(f"tick 간격은 0보다 커야 합니다: {interval}")
        self._on_tick = on_tick
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """현재 이벤트 루프에서 tick을 시작한다. 이미 실행 중이면 무시."""
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._task = self._loop.create_task(self._run())

    def stop(self) -> None:
        """
        tick을 취소한다. 실행 중이 아니면 무시.
        루프 밖의 스레드(세션 정리 스레드)에서 불러도 된다.
        """
        task, self._task = self._task, None
        if task is None:
            return
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is self._loop:
            task.cancel()
            return
        try:
            self._loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            # 루프가 이미 닫힘 - 태스크도 함께 사라졌다
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self._on_tick()
            except Exception as e:
                logger.error(f"tick 처리 실패: {e}")

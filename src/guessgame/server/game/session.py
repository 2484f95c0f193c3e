from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Optional

from guessgame.shared.constants import (
    HIGH_MESSAGE,
    INVALID_MESSAGE,
    LOW_MESSAGE,
    SECRET_MAX,
    SECRET_MIN,
    WELCOME_MESSAGE,
    WIN_MESSAGE,
)
from guessgame.shared.protocols import LineConnection, TransportError, is_quit, parse_guess

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    AWAITING_GUESS = "awaiting_guess"
    WON = "won"
    DISCONNECTED = "disconnected"


TERMINAL_PHASES = frozenset({SessionPhase.WON, SessionPhase.DISCONNECTED})


def draw_secret(rng: random.Random) -> int:
    """从闭区间 [SECRET_MIN, SECRET_MAX] 均匀抽取秘密数字"""
    return rng.randint(SECRET_MIN, SECRET_MAX)


class GameSession:
    """
    单个客户端连接的猜数字会话。

    每个会话拥有自己的秘密数字、猜测计数和随机数生成器，连接只由运行
    该会话的线程使用。状态只能单向推进：
    AWAITING_GUESS -> WON 或 AWAITING_GUESS -> DISCONNECTED。
    """

    def __init__(self, conn: LineConnection, rng: Optional[random.Random] = None):
        self.conn = conn
        # 每个会话一个独立的生成器，避免线程间共享状态
        self._rng = rng if rng is not None else random.Random()
        self.secret = draw_secret(self._rng)
        self.guess_count = 0
        self.phase = SessionPhase.AWAITING_GUESS
        self._started = False

    @property
    def peer(self) -> str:
        if self.conn.addr is None:
            return "<unknown>"
        host, port = self.conn.addr[0], self.conn.addr[1]
        return f"{host}:{port}"

    @property
    def finished(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def _transition(self, phase: SessionPhase) -> None:
        if self.finished:
            raise RuntimeError(f"session already {self.phase.value}, cannot enter {phase.value}")
        self.phase = phase

    def handle_line(self, text: str) -> Optional[str]:
        """把收到的一行应用到会话状态，返回需要回复的消息（无回复时为 None）"""
        if self.finished:
            raise RuntimeError(f"session already {self.phase.value}")

        if is_quit(text):
            logger.info(f"客户端 {self.peer} 发送 QUIT，结束会话")
            self._transition(SessionPhase.DISCONNECTED)
            return None

        guess = parse_guess(text)
        if guess is None:
            logger.info(f"收到来自 {self.peer} 的非法输入: {text!r}")
            return INVALID_MESSAGE

        self.guess_count += 1
        if guess == self.secret:
            self._transition(SessionPhase.WON)
            logger.info(f"客户端 {self.peer} 猜中 {self.secret}，共猜测 {self.guess_count} 次")
            return WIN_MESSAGE
        if guess < self.secret:
            return LOW_MESSAGE
        return HIGH_MESSAGE

    def run(self) -> SessionPhase:
        """驱动整个会话直到进入终止状态，返回最终状态"""
        try:
            self._start()
            while not self.finished:
                self._step()
        except TransportError as exc:
            logger.warning(f"会话 {self.peer} 传输错误: {exc}")
            if not self.finished:
                self._transition(SessionPhase.DISCONNECTED)
        finally:
            self.close()
        return self.phase

    def _start(self) -> None:
        if self._started:
            raise RuntimeError("session already started")
        self._started = True
        self.conn.send_message(WELCOME_MESSAGE)

    def _step(self) -> None:
        line = self.conn.recv_line()
        if line is None:
            logger.info(f"客户端 {self.peer} 断开连接")
            self._transition(SessionPhase.DISCONNECTED)
            return
        reply = self.handle_line(line)
        if reply is not None:
            self.conn.send_message(reply)

    def interrupt(self) -> None:
        """供其他线程调用：让阻塞中的 run() 尽快以 DISCONNECTED 结束"""
        self.conn.interrupt()

    def close(self) -> None:
        """释放会话资源，只能由运行会话的线程调用，重复调用无副作用"""
        self.conn.close()


__all__ = ["GameSession", "SessionPhase", "TERMINAL_PHASES", "draw_secret"]

"""
客户端网络封装：连接服务器，交替显示服务器消息与转发用户猜测。
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from guessgame.shared.constants import DEFAULT_HOST, DEFAULT_PORT, PROMPT_GUESS
from guessgame.shared.protocols import (
    LineConnection,
    MessageKind,
    TransportError,
    classify_message,
    is_quit,
    open_connection,
)

logger = logging.getLogger(__name__)


class GuessClient:
    """同步的命令行客户端，一次只有一个请求在途。"""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self.host = host
        self.port = port
        self.input_func = input_func
        self.output = output
        self.conn: Optional[LineConnection] = None

    @property
    def connected(self) -> bool:
        return self.conn is not None and not self.conn.closed

    def connect(self) -> LineConnection:
        """连接服务器并返回连接，失败时抛出 TransportError"""
        if self.conn is None or self.conn.closed:
            self.conn = open_connection(self.host, self.port)
            logger.debug(f"已连接到 {self.host}:{self.port}")
        return self.conn

    def run(self) -> int:
        """运行猜数字循环，返回进程退出码"""
        try:
            return self._loop(self.connect())
        except TransportError as e:
            self.output(f"Connection error: {e}")
            return 1
        finally:
            self.close()

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
        self.conn = None

    # 内部方法
    def _loop(self, conn: LineConnection) -> int:
        while True:
            message = conn.recv_line()
            if message is None:
                self.output("Server closed the connection.")
                return 1
            self.output(message)
            if classify_message(message) is MessageKind.WIN:
                return 0

            try:
                guess = self.input_func(PROMPT_GUESS)
            except EOFError:
                # 输入流关闭，正常结束
                return 0
            conn.send_line(guess)
            if is_quit(guess):
                return 0


__all__ = ["GuessClient"]

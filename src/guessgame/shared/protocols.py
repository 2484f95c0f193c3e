"""
协议定义

所有消息都是以 "\n" 结尾的 UTF-8 文本行。TCP 不保证一次 send 对应一次 recv，
因此接收方通过 LineBuffer 自行重新分帧；LineConnection 在 socket 之上提供
按行收发，并把底层 OSError 统一包装为 TransportError。
"""

from __future__ import annotations

import socket
from collections import deque
from enum import Enum
from typing import Deque, List, Optional, Tuple

from guessgame.shared.constants import (
    BUFFER_SIZE,
    HIGH_MESSAGE,
    INVALID_MESSAGE,
    LOW_MESSAGE,
    MAX_GUESS_VALUE,
    MAX_LINE_LENGTH,
    QUIT_TOKEN,
    WELCOME_MESSAGE,
    WIN_MESSAGE,
)

_DIGITS = frozenset("0123456789")
_MAX_GUESS_DIGITS = len(str(MAX_GUESS_VALUE))


class TransportError(Exception):
    """传输层错误：connect/accept/recv/send 失败，原始异常保存在 __cause__ 中"""


class MessageKind(Enum):
    """线路上出现的消息种类"""

    WELCOME = "welcome"
    LOW_HINT = "low_hint"
    HIGH_HINT = "high_hint"
    WIN = "win"
    INVALID_INPUT = "invalid_input"
    GUESS_LINE = "guess_line"
    QUIT = "quit"


_SERVER_MESSAGES = {
    WELCOME_MESSAGE.rstrip("\n"): MessageKind.WELCOME,
    LOW_MESSAGE.rstrip("\n"): MessageKind.LOW_HINT,
    HIGH_MESSAGE.rstrip("\n"): MessageKind.HIGH_HINT,
    WIN_MESSAGE.rstrip("\n"): MessageKind.WIN,
    INVALID_MESSAGE.rstrip("\n"): MessageKind.INVALID_INPUT,
}


def strip_line(text: str) -> str:
    """去掉行尾的 "\n" / "\r\n" """
    return text.rstrip("\n").rstrip("\r")


def is_quit(text: str) -> bool:
    """判断是否为客户端的退出指令（大小写敏感）"""
    return strip_line(text).strip() == QUIT_TOKEN


def parse_guess(text: str) -> Optional[int]:
    """解析猜测文本。

    去掉首尾空白后必须非空，且只包含 ASCII 数字 0-9（不允许符号、小数点
    或中间空白），数值不能超过 MAX_GUESS_VALUE。不合法时返回 None。
    """
    token = strip_line(text).strip()
    if not token or not _DIGITS.issuperset(token):
        return None
    # 先按位数拒绝，超长数字串不交给 int()
    digits = token.lstrip("0") or "0"
    if len(digits) > _MAX_GUESS_DIGITS:
        return None
    value = int(digits)
    if value > MAX_GUESS_VALUE:
        return None
    return value


def classify_message(text: str) -> MessageKind:
    """把一行文本归类为某种 MessageKind"""
    line = strip_line(text)
    kind = _SERVER_MESSAGES.get(line)
    if kind is not None:
        return kind
    if is_quit(line):
        return MessageKind.QUIT
    return MessageKind.GUESS_LINE


class LineBuffer:
    """字节流 -> 文本行 的重新分帧缓冲区"""

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH) -> None:
        self.max_line_length = max_line_length
        self._buf = bytearray()
        # 超长行已被整体交出，丢弃其余部分直到下一个换行符
        self._discarding = False

    def feed(self, data: bytes) -> List[str]:
        """追加收到的数据，返回其中所有完整的行（不含换行符）"""
        self._buf.extend(data)
        lines: List[str] = []
        while True:
            try:
                idx = self._buf.index(ord("\n"))
            except ValueError:
                break
            raw = bytes(self._buf[:idx])
            del self._buf[: idx + 1]
            if self._discarding:
                self._discarding = False
                continue
            lines.append(self._decode(raw[: self.max_line_length]))
        if len(self._buf) > self.max_line_length:
            if not self._discarding:
                lines.append(self._decode(bytes(self._buf[: self.max_line_length])))
                self._discarding = True
            self._buf.clear()
        return lines

    def flush(self) -> Optional[str]:
        """连接结束时交出末尾未以换行结尾的残留数据"""
        raw = bytes(self._buf)
        self._buf.clear()
        discarding, self._discarding = self._discarding, False
        if not raw or discarding:
            return None
        return self._decode(raw)

    @staticmethod
    def _decode(raw: bytes) -> str:
        return strip_line(raw.decode("utf-8", errors="replace"))


class LineConnection:
    """一个 TCP 连接的按行收发封装，由单个会话线程独占使用"""

    def __init__(
        self,
        sock: socket.socket,
        addr: Optional[Tuple[str, int]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.sock = sock
        self.addr = addr
        self._reader = LineBuffer()
        self._pending: Deque[str] = deque()
        self._eof = False
        self._closed = False
        if timeout is not None:
            sock.settimeout(timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def recv_line(self) -> Optional[str]:
        """读取一行；对端关闭连接时返回 None"""
        while not self._pending:
            if self._eof:
                return None
            try:
                data = self.sock.recv(BUFFER_SIZE)
            except OSError as exc:
                raise TransportError(f"接收失败: {exc}") from exc
            if not data:
                self._eof = True
                tail = self._reader.flush()
                if tail is not None:
                    self._pending.append(tail)
                continue
            self._pending.extend(self._reader.feed(data))
        return self._pending.popleft()

    def send_message(self, message: str) -> None:
        """发送一条已带换行符的消息，只发送消息本身的字节"""
        try:
            self.sock.sendall(message.encode("utf-8"))
        except OSError as exc:
            raise TransportError(f"发送失败: {exc}") from exc

    def send_line(self, text: str) -> None:
        """原样发送文本并附加分帧换行符"""
        self.send_message(text + "\n")

    def interrupt(self) -> None:
        """唤醒阻塞在 recv 上的会话线程；套接字仍由会话线程自己关闭"""
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.sock.close()


def open_connection(host: str, port: int, timeout: Optional[float] = None) -> LineConnection:
    """连接到服务器，失败时抛出 TransportError"""
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        raise TransportError(f"无法连接 {host}:{port}: {exc}") from exc
    # 连接成功后取消超时，阻塞等待服务器消息
    sock.settimeout(None)
    return LineConnection(sock, (host, port))


__all__ = [
    "LineBuffer",
    "LineConnection",
    "MessageKind",
    "TransportError",
    "classify_message",
    "is_quit",
    "open_connection",
    "parse_guess",
    "strip_line",
]

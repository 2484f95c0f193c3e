"""
网络通信模块

监听端口、接受连接，并为每个连接启动一个独立的会话线程。
"""

from __future__ import annotations

import errno
import logging
import random
import socket
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from guessgame.shared.constants import (
	ACCEPT_RETRY_DELAY,
	DEFAULT_BIND_HOST,
	DEFAULT_PORT,
	LISTEN_BACKLOG,
)
from guessgame.shared.protocols import LineConnection, TransportError
from guessgame.server.game import GameSession

logger = logging.getLogger(__name__)

# 这些错误说明监听套接字本身已失效，继续 accept 没有意义
_FATAL_ACCEPT_ERRNOS = frozenset({errno.EBADF, errno.EINVAL, errno.ENOTSOCK})


class NetworkServer:
	"""会话接收器：负责监听与为每个连接派生会话线程"""

	def __init__(
		self,
		host: str = DEFAULT_BIND_HOST,
		port: int = DEFAULT_PORT,
		rng_factory: Optional[Callable[[], random.Random]] = None,
		idle_timeout: Optional[float] = None,
	):
		self.host = host
		self.port = port
		self.rng_factory = rng_factory or random.Random
		self.idle_timeout = idle_timeout
		self._sock: Optional[socket.socket] = None
		self._accept_thread: Optional[threading.Thread] = None
		self._running = threading.Event()
		self._lock = threading.Lock()
		self.sessions: Dict[int, GameSession] = {}
		self.fatal_error: Optional[TransportError] = None
		self._next_id = 0

	@property
	def running(self) -> bool:
		return self._running.is_set()

	@property
	def address(self) -> Tuple[str, int]:
		"""实际绑定的地址（端口为 0 时由系统分配）"""
		if self._sock is None:
			return (self.host, self.port)
		return self._sock.getsockname()[:2]

	# 服务器生命周期
	def start(self) -> None:
		"""绑定监听端口并启动 Accept 线程，失败时抛出 TransportError"""
		self._sock = self._open_listener()
		self._running.set()
		self._accept_thread = threading.Thread(target=self._accept_loop, name="accept-loop", daemon=True)
		self._accept_thread.start()

	def _open_listener(self) -> socket.socket:
		listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		try:
			listener.bind((self.host, self.port))
			listener.listen(LISTEN_BACKLOG)
		except OSError as exc:
			listener.close()
			raise TransportError(f"无法监听 {self.host}:{self.port}: {exc}") from exc
		return listener

	def stop(self) -> None:
		"""停止接受新连接，并通知所有会话结束

		会话连接只由各自的线程关闭，这里只负责唤醒它们。
		"""
		self._running.clear()
		listener, self._sock = self._sock, None
		if listener is not None:
			# shutdown 使阻塞中的 accept 立即返回
			try:
				listener.shutdown(socket.SHUT_RDWR)
			except OSError:
				pass
			listener.close()
		with self._lock:
			sessions = list(self.sessions.values())
		for sess in sessions:
			sess.interrupt()

	def wait(self, timeout: Optional[float] = None) -> None:
		"""等待 Accept 线程结束"""
		if self._accept_thread is not None:
			self._accept_thread.join(timeout)

	# 接入与会话线程
	def _accept(self, sock: socket.socket) -> Tuple[socket.socket, Tuple[str, int]]:
		try:
			return sock.accept()
		except OSError as exc:
			raise TransportError(f"accept 失败: {exc}") from exc

	def _accept_loop(self) -> None:
		"""Accept 新连接并为其创建会话线程"""
		sock = self._sock
		while self._running.is_set() and sock is not None:
			try:
				conn, addr = self._accept(sock)
			except TransportError as exc:
				if not self._running.is_set():
					# stop() 已关闭监听套接字
					break
				cause = exc.__cause__
				if sock.fileno() == -1 or getattr(cause, "errno", None) in _FATAL_ACCEPT_ERRNOS:
					logger.error(f"监听套接字失效，服务器停止: {exc}")
					self.fatal_error = exc
					self.stop()
					break
				logger.warning(f"{exc}，继续等待连接")
				time.sleep(ACCEPT_RETRY_DELAY)
				continue
			logger.info(f"Accepted connection from {addr[0]}:{addr[1]}")
			self._spawn_session(conn, addr)

	def _spawn_session(self, conn: socket.socket, addr: Tuple[str, int]) -> None:
		sess = GameSession(LineConnection(conn, addr, timeout=self.idle_timeout), rng=self.rng_factory())
		with self._lock:
			if not self._running.is_set():
				# stop() 已经发出，不再启动新会话
				sess.close()
				return
			self._next_id += 1
			session_id = self._next_id
			self.sessions[session_id] = sess
		t = threading.Thread(
			target=self._session_loop,
			args=(session_id, sess),
			name=f"session-{session_id}",
			daemon=True,
		)
		t.start()

	def _session_loop(self, session_id: int, sess: GameSession) -> None:
		"""单会话线程：运行状态机直到结束，然后注销"""
		try:
			phase = sess.run()
			logger.info(f"会话 {sess.peer} 结束: {phase.value}")
		except Exception:
			logger.exception(f"会话 {sess.peer} 异常终止")
			sess.close()
		finally:
			with self._lock:
				self.sessions.pop(session_id, None)


__all__ = [
	"NetworkServer",
]

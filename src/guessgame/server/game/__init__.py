"""
游戏逻辑模块

实现单个连接的猜数字会话状态机。
"""

from .session import GameSession, SessionPhase, draw_secret

__all__ = ["GameSession", "SessionPhase", "draw_secret"]

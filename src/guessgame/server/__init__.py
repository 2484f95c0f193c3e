"""
服务器端模块

负责接受客户端连接，并为每个连接运行独立的猜数字会话。

模块组成：
- game: 单连接会话状态机（秘密数字、猜测计数、提示）
- network: 监听套接字、Accept 循环、每连接一个会话线程

使用方式：
- 入口参见 guessgame/server/main.py，启动 NetworkServer
"""

from . import game, network

__all__ = ["game", "network"]

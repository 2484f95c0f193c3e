"""
客户端模块

负责与服务器通信并驱动交互式猜数字流程。

模块组成：
- network: GuessClient，接收服务器消息、提示用户输入并转发猜测

入口提示：
- 运行 guessgame/client/main.py 启动命令行客户端
"""

from . import network

__all__ = ["network"]

"""
Guess Number - 联网猜数字游戏

A line-based number guessing game played over TCP.
"""

__version__ = "0.1.0"
__author__ = "Guess Number Team"
__license__ = "MIT"

# 导出主要组件
from . import client, server, shared

__all__ = ["client", "server", "shared", "__version__"]

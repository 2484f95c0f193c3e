"""
共享模块

存放客户端和服务器共用的代码，如常量、协议定义、工具函数等。

组件说明：
- constants: 端口、缓冲区大小、协议文本、保留指令
- protocols: 按行分帧（LineBuffer）、连接封装（LineConnection）、猜测解析与消息分类

提示：
- 所有消息均为以 "\n" 结尾的 UTF-8 文本行，接收方必须自行重新分帧
"""

from . import constants, protocols

__all__ = ["constants", "protocols"]

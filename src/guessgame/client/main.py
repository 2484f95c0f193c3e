"""
客户端主程序入口

提示输入服务器地址与端口，然后开始猜数字。
"""

import logging
import sys
from typing import Callable

from guessgame.shared.constants import DEFAULT_HOST, DEFAULT_PORT, PROMPT_HOST, PROMPT_PORT
from guessgame.client.network import GuessClient

logger = logging.getLogger(__name__)


def parse_port(text: str) -> int:
    """解析端口，不是 1-65535 之间的整数时使用默认端口"""
    try:
        port = int(text.strip())
    except ValueError:
        return DEFAULT_PORT
    if not 0 < port < 65536:
        return DEFAULT_PORT
    return port


def prompt_destination(input_func: Callable[[str], str] = input):
    """交互式读取服务器地址与端口"""
    host = input_func(PROMPT_HOST).strip() or DEFAULT_HOST
    port = parse_port(input_func(PROMPT_PORT))
    return host, port


def main():
    """启动客户端主函数"""
    logging.basicConfig(level=logging.WARNING)
    try:
        host, port = prompt_destination()
    except (EOFError, KeyboardInterrupt):
        sys.exit(0)

    client = GuessClient(host, port)
    try:
        code = client.run()
    except KeyboardInterrupt:
        client.close()
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()

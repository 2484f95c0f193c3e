"""
服务器主程序入口

启动猜数字服务器，监听客户端连接。
"""

import logging
import os
import sys
import time
from typing import Optional

from guessgame.shared.constants import DEFAULT_BIND_HOST, DEFAULT_PORT
from guessgame.shared.protocols import TransportError

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler("server.log"), logging.StreamHandler()],
    )


def load_config(environ=None) -> dict:
    """读取环境变量覆盖的监听地址、端口与空闲超时"""
    environ = os.environ if environ is None else environ
    host = environ.get("HOST", DEFAULT_BIND_HOST)
    try:
        port = int(environ.get("PORT", DEFAULT_PORT))
    except ValueError:
        port = DEFAULT_PORT
    idle_timeout: Optional[float] = None
    raw_timeout = environ.get("IDLE_TIMEOUT")
    if raw_timeout:
        try:
            idle_timeout = float(raw_timeout)
        except ValueError:
            logger.warning(f"忽略无效的 IDLE_TIMEOUT: {raw_timeout!r}")
        else:
            if idle_timeout <= 0:
                idle_timeout = None
    return {"host": host, "port": port, "idle_timeout": idle_timeout}


def main():
    """启动服务器主函数"""
    configure_logging()
    config = load_config()

    logger.info("=" * 50)
    logger.info("猜数字服务器启动中...")
    logger.info(f"监听地址: {config['host']}:{config['port']}")
    logger.info("=" * 50)

    from guessgame.server.network import NetworkServer

    server = NetworkServer(config["host"], config["port"], idle_timeout=config["idle_timeout"])
    try:
        server.start()
    except TransportError as e:
        logger.error(f"服务器启动失败: {e}")
        sys.exit(1)

    logger.info("服务器运行中，按 Ctrl+C 停止")
    try:
        # 保持服务器运行，直到被停止或监听套接字失效
        while server.running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("服务器正在关闭...")
        server.stop()
    finally:
        logger.info("服务器已停止")

    if server.fatal_error is not None:
        sys.exit(1)


if __name__ == "__main__":
    main()

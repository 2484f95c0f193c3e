"""
常量定义

定义游戏中使用的各种常量。
"""

# 网络配置
DEFAULT_HOST = "127.0.0.1"
DEFAULT_BIND_HOST = "0.0.0.0"
DEFAULT_PORT = 369
BUFFER_SIZE = 4096
MAX_LINE_LENGTH = 1024
LISTEN_BACKLOG = 5
ACCEPT_RETRY_DELAY = 0.1  # 秒

# 游戏配置
SECRET_MIN = 1
SECRET_MAX = 100
MAX_GUESS_VALUE = 2**31 - 1

# 协议文本（必须逐字节一致）
WELCOME_MESSAGE = (
    "Welcome to the guessing game! I'm thinking of a number between 1 and 100. "
    "Can you guess it?\n"
)
WIN_MESSAGE = "You won!\n"
LOW_MESSAGE = "Your guess is too low.\n"
HIGH_MESSAGE = "Your guess is too high.\n"
INVALID_MESSAGE = "Invalid guess. Please enter a whole number.\n"

# 客户端保留指令
QUIT_TOKEN = "QUIT"

# 客户端提示
PROMPT_HOST = "Enter Servers IP: "
PROMPT_PORT = "Enter Port: "
PROMPT_GUESS = "Enter your guess: "

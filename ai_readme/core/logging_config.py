"""
日志配置。

进程启动时调用一次 configure_logging()，返回的 logger 实例显式传递给需要的组件。
日志必须写入 stderr：stdio 模式下 stdout 专用于 MCP 协议帧。
"""
import logging
import sys
from typing import Optional

LOGGER_NAME = "ai_readme"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_log_level(level_name: Optional[str]) -> int:
    """将日志级别名称转换为 logging 常量，未知名称回退到 INFO"""
    if not level_name:
        return logging.INFO
    level = logging.getLevelName(level_name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    配置根日志处理器并返回 ai_readme 顶层 logger。

    参数:
      level: 日志级别名称（DEBUG/INFO/WARNING/ERROR），为空时读取 settings.LOG_LEVEL
    """
    if level is None:
        from ai_readme.config import settings
        level = settings.LOG_LEVEL

    logging.basicConfig(
        stream=sys.stderr,
        level=resolve_log_level(level),
        format=LOG_FORMAT,
        force=True,
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(level))
    return logger

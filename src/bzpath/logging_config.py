"""Logging setup for applications embedding the path model. / 嵌入路径模型的应用程序的日志配置。

Library modules only create ``logging.getLogger(__name__)`` loggers; attaching handlers is left to the
application, which can call :func:`setup_logging` once at start-up. /
库模块只创建 ``logging.getLogger(__name__)`` 日志记录器；处理器的挂载交给应用程序，在启动时调用一次 :func:`setup_logging` 即可。
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``bzpath`` logger. / 配置 ``bzpath`` 日志记录器。

    Parameters
    ----------
    level:
        Logging level, e.g. ``logging.DEBUG`` to trace every path edit. / 日志级别，例如 ``logging.DEBUG`` 可追踪每次路径编辑。
    log_file:
        Optional file that receives the same records. / 可选的日志文件，接收相同的记录。
    """

    logger = logging.getLogger("bzpath")
    logger.setLevel(level)

    # Reconfiguring must not duplicate output. / 重复配置时不能产生重复输出。
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialised at level %s", logging.getLevelName(level))
    return logger


__all__ = ["setup_logging"]

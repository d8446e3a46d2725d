"""
日志配置

各模块只调用 logging.getLogger(__name__)。这里为包级logger
（core / storage / visualization / cli）挂载控制台和文件处理器，
子模块的日志经由包级logger输出。采样和栅格化在线程池中运行，
因此两种格式都带上线程名。
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

PACKAGE_LOGGERS = ("core", "storage", "visualization", "cli")

TEXT_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"

_ROTATIONS = {
    "daily": "midnight",
    "hourly": "H",
}


class LoggerConfigError(Exception):
    """日志配置错误"""
    pass


class JsonFormatter(logging.Formatter):
    """每条日志输出一行JSON，extra={"extra_data": {...}} 的字段展开到顶层"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "extra_data", {}))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """单行文本格式"""

    def __init__(self, fmt: Optional[str] = None):
        super().__init__(fmt=fmt or TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _make_formatter(format: str) -> logging.Formatter:
    if format == "json":
        return JsonFormatter()
    if format == "text":
        return TextFormatter()
    raise LoggerConfigError(f"无效的日志格式: {format}. 有效值: ['text', 'json']")


def _level_number(level: str) -> int:
    name = level.upper()
    if name not in Logger.LEVEL_MAP:
        raise LoggerConfigError(f"无效的日志级别: {level}. 有效值: {list(Logger.LEVEL_MAP)}")
    return Logger.LEVEL_MAP[name]


class Logger:
    """
    一组同级logger的处理器管理，方法支持链式调用

    构造时清空已有处理器并关闭向root的传播，重复配置不会重复输出。
    """

    LEVEL_MAP = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    def __init__(self, names: Union[str, Iterable[str]] = PACKAGE_LOGGERS, level: str = "INFO"):
        """
        Args:
            names: logger名称或名称列表
            level: DEBUG / INFO / WARNING / ERROR / CRITICAL

        Raises:
            LoggerConfigError: 无效的日志级别
        """
        number = _level_number(level)
        self.names: List[str] = [names] if isinstance(names, str) else list(names)
        self.level = level.upper()
        self._loggers = [logging.getLogger(name) for name in self.names]

        for lg in self._loggers:
            lg.setLevel(number)
            lg.handlers = []
            lg.propagate = False

    @property
    def loggers(self) -> List[logging.Logger]:
        return list(self._loggers)

    def _attach(self, handler: logging.Handler, format: str) -> "Logger":
        handler.setFormatter(_make_formatter(format))
        handler.setLevel(self.LEVEL_MAP[self.level])
        for lg in self._loggers:
            lg.addHandler(handler)
        return self

    def add_console_handler(self, format: str = "text") -> "Logger":
        """输出到stderr，stdout留给CLI的结果表格"""
        return self._attach(logging.StreamHandler(sys.stderr), format)

    def add_file_handler(
        self,
        path: str,
        rotation: str = "none",
        format: str = "text",
        backup_count: int = 7
    ) -> "Logger":
        """
        输出到文件

        Args:
            path: 日志文件路径，父目录不存在时创建
            rotation: "none"、"daily" 或 "hourly"
            format: "text" 或 "json"
            backup_count: 轮转时保留的历史文件数
        """
        if rotation != "none" and rotation not in _ROTATIONS:
            raise LoggerConfigError(f"无效的轮转策略: {rotation}")

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        if rotation == "none":
            handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
        else:
            handler = TimedRotatingFileHandler(
                path, when=_ROTATIONS[rotation], interval=1,
                backupCount=backup_count, encoding="utf-8"
            )
        return self._attach(handler, format)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format: str = "text",
    rotation: str = "none"
) -> Logger:
    """为包级logger配置控制台（及可选文件）输出"""
    manager = Logger(PACKAGE_LOGGERS, level=level).add_console_handler(format=format)
    if log_file:
        manager.add_file_handler(log_file, rotation=rotation, format=format)
    return manager

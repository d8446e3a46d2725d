"""通用工具 - 日志与配置加载"""

from .logger import Logger, LoggerConfigError, setup_logging
from .config_loader import ConfigLoader, ConfigLoadError, ConfigValidationError

__all__ = [
    'Logger',
    'LoggerConfigError',
    'setup_logging',
    'ConfigLoader',
    'ConfigLoadError',
    'ConfigValidationError',
]

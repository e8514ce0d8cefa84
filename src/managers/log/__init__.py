"""
Channel logging module

Writes messages into per-channel files under a timestamped session folder:
``<base>/Logs/<YYYY-MM-DD_HH-mm-ss>/<channel>.log``

Usage:
    from src.managers.log import LogChannel, LogLevel, create_channel_logger

    logger = create_channel_logger("data", keep_sessions=5)
    logger.set_level(LogChannel.NETWORK, LogLevel.WARNING)
    logger.log(LogChannel.NETWORK, "timeout", LogLevel.WARNING)

    try:
        load_save()
    except ValueError as e:
        logger.log_exception(LogChannel.PERSISTENCE, e, "Save file rejected")
"""

from .channels import ChannelConfig, LogChannel, LogLevel, default_channel_configs
from .logger import ChannelLogger, create_channel_logger, setup_console_logger
from .session import LogSession, LogSessionError, prune_old_sessions

__all__ = [
    "ChannelConfig",
    "ChannelLogger",
    "LogChannel",
    "LogLevel",
    "LogSession",
    "LogSessionError",
    "create_channel_logger",
    "default_channel_configs",
    "prune_old_sessions",
    "setup_console_logger",
]

__version__ = "1.0.0"
__description__ = "Per-channel session log files with level filtering"

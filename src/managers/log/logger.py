"""
Channel logger.

Routes messages by channel and level into per-channel files of the
current session folder, optionally mirroring them to a console sink.
"""

import logging
import threading
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

from .channels import ChannelConfig, LogChannel, LogLevel, default_channel_configs
from .session import LogSession, prune_old_sessions


ENTRY_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"
HEADER_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_LOGGER_NAME = "channel_logger"


def format_entry(when: datetime, level: LogLevel, channel: LogChannel, message: str) -> str:
    """Render one log line (without the trailing newline)."""
    # %f is microseconds, entries carry milliseconds
    timestamp = when.strftime(ENTRY_TIME_FORMAT)[:-3]
    return f"{timestamp} [{level.label}] [{channel.label}] {message}"


def format_header(when: datetime) -> str:
    return f"--- SESSION START {when.strftime(HEADER_TIME_FORMAT)} ---"


def setup_console_logger(
    logger_name: str = CONSOLE_LOGGER_NAME,
    log_format: str = "%(message)s",
) -> logging.Logger:
    """
    Build the default console sink.

    Entries are formatted before they reach the sink, so the default
    format only prints the message.

    Args:
        logger_name: Name of the stdlib logger
        log_format: Formatter pattern for the console handler

    Returns:
        logging.Logger: Logger with a single stream handler
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # avoid duplicate output when several loggers share the name
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(console_handler)

    return logger


class ChannelLogger:
    """
    Multi-channel session logger.

    - One session folder per instance, created at construction
    - One file per channel, with a session-start header before its first entry
    - Per-channel minimum levels
    - Optional echo of every written entry to a console sink

    All registry state, the header bookkeeping and every file append are
    guarded by a single lock, so concurrent callers never interleave lines
    and a file never gets two headers.
    """

    def __init__(
        self,
        log_base_path: Union[str, Path],
        console: Optional[Any] = None,
        echo_to_console: bool = True,
        default_level: LogLevel = LogLevel.INFO,
        session: Optional[LogSession] = None,
    ):
        """
        Args:
            log_base_path: Writable directory that receives ``Logs/``
            console: Sink with info/warning/error methods, defaults to a stdlib logger
            echo_to_console: Mirror written entries to the console sink
            default_level: Initial minimum level of every channel
            session: Existing session to adopt instead of starting a new one

        Raises:
            LogSessionError: If the session folder cannot be created
        """
        self.log_base_path = Path(log_base_path)
        self.session = session or LogSession.start(self.log_base_path)
        self.console = console if console is not None else setup_console_logger()
        self.echo_to_console = echo_to_console

        self._lock = threading.Lock()
        self._channel_configs: Dict[LogChannel, ChannelConfig] = default_channel_configs(default_level)
        self._header_written: Set[LogChannel] = set()

    @property
    def session_stamp(self) -> str:
        return self.session.stamp

    @property
    def session_folder_path(self) -> str:
        """Absolute path of this session's folder."""
        return str(self.session.folder_path)

    # registry

    def set_level(self, channel: LogChannel, level: LogLevel):
        """Set the minimum level a channel needs to write."""
        with self._lock:
            self._channel_configs[channel].minimum_level = level

    def set_all_levels(self, level: LogLevel):
        """Set the same minimum level on every channel."""
        with self._lock:
            for config in self._channel_configs.values():
                config.minimum_level = level

    def set_channel_file_name(self, channel: LogChannel, file_name: Optional[str]):
        """
        Point a channel at another file in the session folder.

        Blank names are ignored. Any accepted name, including one the
        channel used earlier in this session, gets a fresh header on the
        next write, so switching away from a file and back writes a second
        header into it.
        """
        if file_name is None or not file_name.strip():
            return
        with self._lock:
            self._channel_configs[channel].file_name = file_name
            self._header_written.discard(channel)

    def get_level(self, channel: LogChannel) -> LogLevel:
        with self._lock:
            return self._channel_configs[channel].minimum_level

    def get_channel_file_name(self, channel: LogChannel) -> str:
        with self._lock:
            return self._channel_configs[channel].file_name

    def get_channel_file_path(self, channel: LogChannel) -> str:
        return str(self.session.folder_path / self.get_channel_file_name(channel))

    def get_log_files(self) -> Dict[LogChannel, str]:
        """
        Get the file path of every channel.

        Returns:
            Dict[LogChannel, str]: Channel to absolute file path
        """
        with self._lock:
            return {
                channel: str(self.session.folder_path / config.file_name)
                for channel, config in self._channel_configs.items()
            }

    # write path

    def log(self, channel: LogChannel, message: str, level: LogLevel = LogLevel.INFO) -> bool:
        """
        Write a message to a channel.

        Returns:
            bool: True if the entry reached the channel's file
        """
        return self._log_internal(channel, message, level, None)

    def log_exception(
        self,
        channel: LogChannel,
        exception: BaseException,
        context_message: Optional[str] = None,
    ) -> bool:
        """
        Write an exception with its stack trace at ERROR level.

        The exception object itself is handed to the console sink.
        """
        stack = "".join(traceback.format_tb(exception.__traceback__)).rstrip("\n")
        message = f"Exception: {type(exception).__name__}: {exception}"
        # exceptions that were never raised carry no traceback
        if stack:
            message = f"{message}\n{stack}"
        if context_message is not None:
            message = f"{context_message}\n{message}"
        return self._log_internal(channel, message, LogLevel.ERROR, exception)

    def verbose(self, channel: LogChannel, message: str) -> bool:
        return self.log(channel, message, LogLevel.VERBOSE)

    def info(self, channel: LogChannel, message: str) -> bool:
        return self.log(channel, message, LogLevel.INFO)

    def warning(self, channel: LogChannel, message: str) -> bool:
        return self.log(channel, message, LogLevel.WARNING)

    def error(self, channel: LogChannel, message: str) -> bool:
        return self.log(channel, message, LogLevel.ERROR)

    def _log_internal(
        self,
        channel: LogChannel,
        message: str,
        level: LogLevel,
        exception: Optional[BaseException],
    ) -> bool:
        with self._lock:
            threshold = self._channel_configs[channel].minimum_level

        if level < threshold:
            return False

        entry = format_entry(datetime.now(), level, channel, message)
        written = self._append(channel, entry)

        if self.echo_to_console:
            self._echo(entry, level, exception)
        return written

    def _append(self, channel: LogChannel, entry: str) -> bool:
        failure: Optional[OSError] = None
        with self._lock:
            file_path = self.session.folder_path / self._channel_configs[channel].file_name
            needs_header = channel not in self._header_written

            text = f"{entry}\n"
            if needs_header:
                text = f"{format_header(datetime.now())}\n{text}"

            try:
                with open(file_path, "a", encoding="utf-8") as f:
                    f.write(text)
            except OSError as e:
                failure = e
            else:
                self._header_written.add(channel)

        if failure is not None:
            self.console.warning(
                f"Failed to write to channel {channel.label} ({file_path}): {failure}"
            )
            return False
        return True

    def _echo(self, entry: str, level: LogLevel, exception: Optional[BaseException]):
        if level == LogLevel.ERROR:
            if exception is not None:
                self.console.error(entry, exc_info=exception)
            else:
                self.console.error(entry)
        elif level == LogLevel.WARNING:
            self.console.warning(entry)
        else:
            self.console.info(entry)

    # session maintenance

    def prune_old_sessions(self, keep_newest: int = 5) -> List[Path]:
        """
        Keep only the newest session folders, never deleting the active one.

        Args:
            keep_newest: Number of folders to keep

        Returns:
            List[Path]: Folders that were deleted
        """
        return prune_old_sessions(
            self.session.logs_root,
            self.session.folder_path,
            keep_newest=keep_newest,
            console=self.console,
        )

    def __str__(self) -> str:
        return f"ChannelLogger(session={self.session_stamp}, dir={self.session_folder_path})"

    def __repr__(self) -> str:
        return (
            f"ChannelLogger("
            f"base_path='{self.log_base_path}', "
            f"session_folder='{self.session_folder_path}', "
            f"echo_to_console={self.echo_to_console})"
        )


def create_channel_logger(
    log_base_path: Union[str, Path],
    console_output: bool = True,
    keep_sessions: Optional[int] = None,
) -> ChannelLogger:
    """
    Convenience factory for a channel logger.

    Args:
        log_base_path: Writable directory that receives ``Logs/``
        console_output: Mirror written entries to the console
        keep_sessions: If given, prune all but this many session folders at startup

    Returns:
        ChannelLogger: Logger bound to a fresh session folder
    """
    channel_logger = ChannelLogger(log_base_path=log_base_path, echo_to_console=console_output)
    if keep_sessions is not None:
        channel_logger.prune_old_sessions(keep_sessions)
    return channel_logger

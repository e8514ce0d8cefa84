"""
Channel and level definitions for the channel logger.

Add a member to LogChannel to get a new channel; its default config is
generated from the enum, so nothing else needs updating.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict


class LogLevel(IntEnum):
    """Ordered severity. Messages below a channel's minimum are dropped."""

    VERBOSE = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @property
    def label(self) -> str:
        """Name as rendered in log lines, e.g. ``Info``."""
        return self.name.capitalize()


class LogChannel(str, Enum):
    """Logical category a message belongs to."""

    GLOBAL = "Global"
    GAMEPLAY = "Gameplay"
    AI = "AI"
    UI = "UI"
    AUDIO = "Audio"
    NETWORK = "Network"
    PERSISTENCE = "Persistence"
    ANALYTICS = "Analytics"
    SYSTEMS = "Systems"

    @property
    def label(self) -> str:
        return self.value


@dataclass
class ChannelConfig:
    minimum_level: LogLevel
    file_name: str


def default_file_name(channel: LogChannel) -> str:
    """Default file for a channel, e.g. ``gameplay.log``."""
    return f"{channel.value.lower()}.log"


def default_channel_configs(level: LogLevel = LogLevel.INFO) -> Dict[LogChannel, ChannelConfig]:
    """
    Build one config per channel.

    Args:
        level: Minimum level applied to every channel

    Returns:
        Dict[LogChannel, ChannelConfig]: Fresh, independent configs
    """
    return {
        channel: ChannelConfig(minimum_level=level, file_name=default_file_name(channel))
        for channel in LogChannel
    }

"""Contains the dataclasses for the video model."""

__all__ = ["Channel", "Video"]


from dataclasses import dataclass


@dataclass(frozen=True)
class Channel:
    """Represents a YouTube channel."""

    id: str
    """The unique ID of the channel"""

    name: str
    """The name of the channel"""

    link: str
    """The URL of the channel"""


@dataclass(frozen=True)
class Video:
    """Represents a YouTube video."""

    id: str
    """The unique ID of the video"""

    title: str
    """The title of the video"""

    link: str
    """The URL of the video"""

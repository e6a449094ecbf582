"""
Frame source contract.

A source decodes one video in order. The frame loop only ever calls
read(); the controller calls open() before the worker starts and may call
close() from its own thread while the worker is still reading.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from models.frame import FrameData


class SourceOpenError(RuntimeError):
    """Raised when a source cannot be opened (missing file, unsupported codec)."""


@dataclass
class ObservationConfig:
    """
    Attributes:
        source_id: Short name for the video, used in logs.
    """
    source_id: str = "video"


class ObservationSource(ABC):
    """
    Decodes frames from one video.

    open() must succeed before the first read(). read() yields frames in
    decoding order and returns None once the video is exhausted; after that
    every call returns None. close() releases the decoder and may race with
    a read() on another thread.

        with create_video_source("clip.mp4") as source:
            for frame_data in source:
                handle(frame_data.frame)
    """

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def frame_index(self) -> int:
        """1-based index of the last frame returned; 0 before the first read."""
        return self._frame_index

    @abstractmethod
    def open(self) -> None:
        """
        Prepare the decoder.

        Raises:
            SourceOpenError: the file is missing or cannot be decoded.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """Next decoded frame, or None at end of video or once closed."""

    @abstractmethod
    def close(self) -> None:
        """Release the decoder. Idempotent."""

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __iter__(self) -> Iterator[FrameData]:
        if not self._is_open:
            raise RuntimeError("Source must be opened before iterating")
        frame_data = self.read()
        while frame_data is not None:
            yield frame_data
            frame_data = self.read()

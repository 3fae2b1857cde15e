"""Abstract base for recognition engine backends."""

import io
from abc import ABC, abstractmethod

from PIL import Image

from inkexpr.config import EngineConfig


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class BaseProvider(ABC):
    name: str = "engine"

    @abstractmethod
    def recognize(self, image: Image.Image, engine: EngineConfig) -> str:
        """Read the binarized *image* and return the engine's raw text.

        Engine errors are raised as :class:`~inkexpr.errors.RecognitionFailure`.
        """
        ...

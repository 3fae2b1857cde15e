"""Local Tesseract backend via pytesseract."""

import logging
import shlex
from typing import Optional

import pytesseract
from PIL import Image

from inkexpr.config import EngineConfig
from inkexpr.errors import RecognitionFailure
from inkexpr.providers.base import BaseProvider

logger = logging.getLogger(__name__)


def build_tesseract_config(engine: EngineConfig) -> str:
    """Translate an :class:`EngineConfig` into a tesseract argument string."""
    args = [
        f"--oem {engine.engine_mode}",
        f"--psm {engine.page_segmentation_mode}",
        f"--dpi {engine.dpi}",
    ]
    if engine.char_whitelist:
        args.append("-c " + shlex.quote(f"tessedit_char_whitelist={engine.char_whitelist}"))
    return " ".join(args)


class TesseractProvider(BaseProvider):
    name = "tesseract"

    def __init__(self, tesseract_cmd: Optional[str] = None, timeout: float = 0) -> None:
        # pytesseract reads the binary path from a module global, so this is
        # process-wide: the last provider built with a command wins.
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.tesseract_cmd = tesseract_cmd
        self.timeout = timeout

    def recognize(self, image: Image.Image, engine: EngineConfig) -> str:
        config = build_tesseract_config(engine)
        logger.debug("Running tesseract with %s", config)
        try:
            return pytesseract.image_to_string(
                image,
                lang=engine.language,
                config=config,
                timeout=self.timeout,
            )
        except pytesseract.TesseractNotFoundError as e:
            raise RecognitionFailure(self.name, "tesseract binary not found on PATH") from e
        except pytesseract.TesseractError as e:
            raise RecognitionFailure(self.name, f"tesseract exited with status {e.status}: {e.message}") from e
        except RuntimeError as e:
            # pytesseract signals a kill after `timeout` seconds with a bare RuntimeError.
            raise RecognitionFailure(self.name, str(e) or "tesseract timed out") from e
        except OSError as e:
            # Anything but ENOENT, e.g. a TESSERACT_CMD that is not executable.
            raise RecognitionFailure(self.name, f"cannot run tesseract: {e}") from e

"""End-to-end recognition: canvas snapshot in, normalized expression out."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from PIL import Image

from inkexpr.config import PipelineConfig
from inkexpr.errors import RecognitionFailure
from inkexpr.postprocessing import normalize_expression
from inkexpr.preprocessing import EMPTY_BOX, BoundingBox, prepare_ink, scan_ink_bounds
from inkexpr.providers.base import BaseProvider

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    RECOGNIZED = "recognized"
    NO_INK = "no_ink"
    RECOGNITION_FAILED = "recognition_failed"
    EMPTY_EXPRESSION = "empty_expression"


@dataclass(frozen=True)
class RecognitionResult:
    outcome: Outcome
    expression: str = ""
    raw_text: Optional[str] = None
    error: Optional[RecognitionFailure] = None
    bounds: BoundingBox = EMPTY_BOX
    prepared: Optional[Image.Image] = None

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.RECOGNIZED


def recognize_expression(
    image: Optional[Image.Image],
    provider: BaseProvider,
    config: Optional[PipelineConfig] = None,
) -> RecognitionResult:
    """Locate the ink on *image*, read it with *provider* and normalize the text.

    No-ink, engine failure and an empty normalized result are all reported
    through :attr:`RecognitionResult.outcome` rather than raised.  The
    provider is not called when there is no ink.
    """
    config = config or PipelineConfig()

    bounds = scan_ink_bounds(image, config)
    if bounds.is_empty:
        logger.debug("No ink found")
        return RecognitionResult(outcome=Outcome.NO_INK)

    prepared = prepare_ink(image, bounds, config)

    try:
        raw_text = provider.recognize(prepared, config.engine)
    except RecognitionFailure as e:
        logger.warning("Recognition failed: %s", e)
        return RecognitionResult(
            outcome=Outcome.RECOGNITION_FAILED,
            error=e,
            bounds=bounds,
            prepared=prepared,
        )
    logger.debug("Raw text from %s: %r", provider.name, raw_text)

    expression = normalize_expression(raw_text, config.substitutions)
    outcome = Outcome.RECOGNIZED if expression else Outcome.EMPTY_EXPRESSION
    return RecognitionResult(
        outcome=outcome,
        expression=expression,
        raw_text=raw_text,
        bounds=bounds,
        prepared=prepared,
    )

"""Anthropic Claude vision backend."""

import base64

import anthropic
from PIL import Image

from inkexpr.config import EngineConfig
from inkexpr.errors import RecognitionFailure
from inkexpr.prompt import HANDWRITTEN_EXPRESSION_PROMPT, instruction_for
from inkexpr.providers.base import BaseProvider, encode_png

SYSTEM_PROMPT = HANDWRITTEN_EXPRESSION_PROMPT


class AnthropicProvider(BaseProvider):
    name = "anthropic"

    def __init__(self, api_key: str, model: str) -> None:
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def recognize(self, image: Image.Image, engine: EngineConfig) -> str:
        b64 = base64.standard_b64encode(encode_png(image)).decode("utf-8")
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": b64,
                },
            },
            {"type": "text", "text": instruction_for(engine.char_whitelist)},
        ]

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=256,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": content}],
            )
        except anthropic.AnthropicError as e:
            raise RecognitionFailure(self.name, str(e)) from e

        if not response.content:
            return ""
        return response.content[0].text

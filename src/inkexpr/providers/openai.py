"""OpenAI GPT-4o vision backend."""

import base64

import openai
from openai import OpenAI
from PIL import Image

from inkexpr.config import EngineConfig
from inkexpr.errors import RecognitionFailure
from inkexpr.prompt import HANDWRITTEN_EXPRESSION_PROMPT, instruction_for
from inkexpr.providers.base import BaseProvider, encode_png

SYSTEM_PROMPT = HANDWRITTEN_EXPRESSION_PROMPT


class OpenAIProvider(BaseProvider):
    name = "openai"

    def __init__(self, api_key: str, model: str) -> None:
        self.client = OpenAI(api_key=api_key)
        self.model = model

    def recognize(self, image: Image.Image, engine: EngineConfig) -> str:
        b64 = base64.standard_b64encode(encode_png(image)).decode("utf-8")
        content = [
            {
                "type": "image_url",
                "image_url": {
                    "url": f"data:image/png;base64,{b64}",
                    "detail": "high",
                },
            },
            {"type": "text", "text": instruction_for(engine.char_whitelist)},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=256,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": content},
                ],
            )
        except openai.OpenAIError as e:
            raise RecognitionFailure(self.name, str(e)) from e

        return response.choices[0].message.content or ""

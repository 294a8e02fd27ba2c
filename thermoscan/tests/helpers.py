"""
Shared test doubles for the pipeline tests.
"""

import asyncio
import io
import random

import numpy as np
from PIL import Image


class ScriptedRandom(random.Random):
    """Random source that returns scripted ``random()`` draws before falling back to a seed."""

    def __init__(self, values=(), seed=0):
        super().__init__(seed)
        self._values = list(values)

    def random(self):
        if self._values:
            return self._values.pop(0)
        return super().random()


class RecordingSleep:
    """Sleep stand-in that records requested delays and returns immediately."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class DummyGenAIClient:
    """Text-generation collaborator returning a canned payload or raising."""

    def __init__(self, payload=None, error=None, available=True):
        self.payload = payload
        self.error = error
        self.available = available
        self.prompts = []
        self.gate = None

    def is_available(self):
        return self.available

    async def generate_json(self, prompt, response_schema=None):
        self.prompts.append(prompt)
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


def png_bytes(size=(64, 64), seed=0, channels=3):
    """Encode a noise image; noise keeps the PNG above the low-signal size."""
    pixels = np.random.default_rng(seed).integers(
        0, 256, size=(size[1], size[0], channels), dtype=np.uint8
    )
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


async def wait_until(predicate, attempts=1000):
    """Poll the event loop until ``predicate`` holds; executor jobs need real ticks."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.001)
    raise AssertionError("condition was not reached")

"""
Image blob store.

Gives ``source_image_ref`` a concrete meaning: uploaded image bytes are kept
base64-encoded in the key-value collaborator under ``image:<ref>``.
"""

import base64
import binascii
import logging
import uuid
from typing import Optional

from thermoscan.infrastructure.constants.pipeline_constants import IMAGE_KEY_PREFIX
from thermoscan.infrastructure.persistence.key_value_store import KeyValueStore

logger = logging.getLogger(__name__)


class ImageStore:
    def __init__(self, store: KeyValueStore):
        self._store = store

    def save(self, content: bytes) -> str:
        ref = uuid.uuid4().hex
        encoded = base64.b64encode(content).decode("ascii")
        if not self._store.set(self._key(ref), encoded):
            logger.warning(f"Image {ref} could not be persisted")
        return ref

    def load(self, ref: str) -> Optional[bytes]:
        encoded = self._store.get(self._key(ref), None)
        if not isinstance(encoded, str):
            return None
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            logger.error(f"Stored image {ref} is not valid base64: {e}")
            return None

    def delete(self, ref: str) -> None:
        self._store.delete(self._key(ref))

    @staticmethod
    def _key(ref: str) -> str:
        return f"{IMAGE_KEY_PREFIX}{ref}"

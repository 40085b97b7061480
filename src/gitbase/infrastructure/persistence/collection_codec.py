"""Codec for collection documents.

A collection is stored as a pretty-printed JSON array of record objects,
encoded as UTF-8.
"""

import json
from typing import Any

from gitbase.core.exceptions import CollectionDecodeError


class CollectionCodec:
    """Encode and decode collection documents."""

    INDENT = 2

    @classmethod
    def encode(cls, records: list[dict[str, Any]]) -> bytes:
        """Serialize records into document bytes.

        Non-ASCII text is written as-is; values that are not JSON-native
        (datetimes, for example) are written using ``str()``.
        """
        text = json.dumps(records, indent=cls.INDENT, ensure_ascii=False, default=str)
        return text.encode("utf-8")

    @classmethod
    def decode(cls, collection: str, content: bytes) -> list[dict[str, Any]]:
        """Parse document bytes back into records.

        An empty document decodes to an empty collection.

        Raises:
            CollectionDecodeError: If the document is not a JSON array of objects.
        """
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CollectionDecodeError(collection, "content is not valid UTF-8") from e

        if not text.strip():
            return []

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CollectionDecodeError(collection, f"invalid JSON ({e.msg})") from e

        if not isinstance(data, list):
            raise CollectionDecodeError(collection, "document is not a JSON array")
        if not all(isinstance(item, dict) for item in data):
            raise CollectionDecodeError(collection, "every record must be a JSON object")

        return data

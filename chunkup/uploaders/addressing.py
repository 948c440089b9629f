"""Content identifiers for chunks.

An identifier is ``<lowercase hex sha256>-<decimal byte length>``. It is a
pure function of the chunk bytes, which is what makes probe-based
deduplication and resume work.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from chunkup.core.exceptions import ValidationError
from chunkup.uploaders.constants import DIGEST_ALGORITHM, IDENTIFIER_SEPARATOR

_DIGEST_PATTERN = re.compile(r"^[0-9a-f]{64}$")
_SIZE_PATTERN = re.compile(r"^(0|[1-9][0-9]*)$")


@dataclass(frozen=True)
class ContentIdentifier:
    """Digest and length of a chunk."""

    digest: str
    size: int

    def __str__(self) -> str:
        return f"{self.digest}{IDENTIFIER_SEPARATOR}{self.size}"

    @property
    def value(self) -> str:
        """Composite identifier string."""
        return str(self)

    @property
    def probe_key(self) -> str:
        """Key the probe response uses for this chunk."""
        return f"{DIGEST_ALGORITHM}-{self.digest}"

    def to_wire(self) -> dict[str, str]:
        """``{"hash", "size"}`` pair as sent in probe and finalize bodies."""
        return {"hash": self.digest, "size": str(self.size)}

    @classmethod
    def parse(cls, text: str) -> ContentIdentifier:
        """Split a composite identifier on its first separator.

        Raises:
            ValidationError: If either half is malformed.
        """
        digest, sep, size = text.partition(IDENTIFIER_SEPARATOR)
        if not sep or not _DIGEST_PATTERN.match(digest) or not _SIZE_PATTERN.match(size):
            raise ValidationError(
                f"Malformed content identifier: {text!r}", field="identifier", value=text
            )
        return cls(digest=digest, size=int(size))


def compute_identifier(data: bytes) -> ContentIdentifier:
    """Compute the content identifier of a chunk."""
    return ContentIdentifier(digest=hashlib.sha256(data).hexdigest(), size=len(data))

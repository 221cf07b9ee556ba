"""File type detection and hashing utilities."""

from __future__ import annotations

import hashlib
import logging
import warnings
from pathlib import Path
from typing import Iterable, Optional

from PIL import Image

from tractor.config.models import DEFAULT_IMAGE_EXTENSIONS, DEFAULT_IMAGE_FORMATS

LOGGER = logging.getLogger(__name__)


class TypeDetector:
    """Decide whether a file is an image the resource should accept."""

    def __init__(
        self,
        *,
        extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS,
        image_formats: Iterable[str] = DEFAULT_IMAGE_FORMATS,
        sniff_content: bool = True,
    ) -> None:
        self.extensions = frozenset(item.lower() for item in extensions)
        self.image_formats = frozenset(item.upper() for item in image_formats)
        self.sniff_content = sniff_content

    def detect(self, path: Path) -> Optional[str]:
        """Return the Pillow format name for path, or None if it is not a readable image.

        Only the header is read, so the decompression-bomb pixel limit does not
        apply: oversized images still report their format.
        """
        try:
            return self._open_format(path)
        except Image.DecompressionBombError:
            limit = Image.MAX_IMAGE_PIXELS
            Image.MAX_IMAGE_PIXELS = None
            try:
                return self._open_format(path)
            except Exception as exc:  # corrupt, truncated or non-image content
                LOGGER.debug("Unable to identify %s as an image: %s", path, exc)
                return None
            finally:
                Image.MAX_IMAGE_PIXELS = limit
        except Exception as exc:  # corrupt, truncated or non-image content
            LOGGER.debug("Unable to identify %s as an image: %s", path, exc)
            return None

    @staticmethod
    def _open_format(path: Path) -> Optional[str]:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", Image.DecompressionBombWarning)
            with Image.open(path) as img:
                return img.format

    def accepts(self, path: Path) -> bool:
        """Return True when the suffix and, if enabled, the file signature are allowed.

        Args:
            path: Candidate file.

        Returns:
            bool: Whether the file may be imported. Never raises.
        """
        if path.suffix.lower() not in self.extensions:
            return False
        if not self.sniff_content:
            return True
        image_format = self.detect(path)
        return image_format is not None and image_format.upper() in self.image_formats


class HashComputer:
    """Compute content hashes for deduplication."""

    def __init__(self, chunk_size: int = 1024 * 1024) -> None:
        self.chunk_size = chunk_size

    def compute(self, path: Path) -> str:
        """Return the SHA-256 hex digest of the file contents.

        Raises:
            OSError: If the file cannot be read.
        """
        digest = hashlib.sha256()
        with path.open("rb") as fh:
            for chunk in iter(lambda: fh.read(self.chunk_size), b""):
                digest.update(chunk)
        return digest.hexdigest()


__all__ = ["TypeDetector", "HashComputer"]

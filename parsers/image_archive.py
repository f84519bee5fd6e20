"""
Image archive indexer for catalog imports.

Unpacks a ZIP of product photos into a name -> data URI mapping. Each image
is stored under its base filename (extension stripped) and under the
lower-cased form of that name, so spreadsheet names can match either way.
"""

import base64
import mimetypes
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Optional
import structlog

from exceptions import ImageArchiveParseError

logger = structlog.get_logger(__name__)

MACOS_METADATA_DIR = "__MACOSX"
DEFAULT_IMAGE_MIME = "image/png"


@dataclass
class ImageIndex:
    """Indexed images from one archive."""
    images: dict[str, str] = field(default_factory=dict)
    image_count: int = 0
    archive_supplied: bool = False

    def lookup(self, name: str) -> Optional[str]:
        """Exact name first, then lower-cased name."""
        return self.images.get(name) or self.images.get(name.lower())


def index_image_archive(content: Optional[bytes]) -> ImageIndex:
    """
    Build an ImageIndex from ZIP bytes.

    Skips directories and metadata artifacts (__MACOSX folders, dot-files,
    anything under a hidden folder). Later entries overwrite earlier ones
    on key collision.

    Args:
        content: ZIP bytes, or None when no archive was uploaded

    Returns:
        ImageIndex (empty with archive_supplied=False for no archive)

    Raises:
        ImageArchiveParseError: If the bytes are not a readable ZIP
    """
    if not content:
        return ImageIndex()

    logger.info("indexing_image_archive", size=len(content))

    index = ImageIndex(archive_supplied=True)

    try:
        with zipfile.ZipFile(BytesIO(content)) as archive:
            for entry in archive.infolist():
                if entry.is_dir() or is_metadata_path(entry.filename):
                    continue

                key = image_key(entry.filename)
                if not key:
                    continue

                payload = base64.b64encode(archive.read(entry)).decode("ascii")
                data_uri = f"data:{_guess_mime(entry.filename)};base64,{payload}"

                index.images[key] = data_uri
                index.images[key.lower()] = data_uri
                index.image_count += 1

    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        logger.error("image_archive_read_failed", error=str(e))
        raise ImageArchiveParseError(
            message="Failed to read image archive",
            details={"original_error": str(e)}
        )

    logger.info(
        "image_archive_indexed",
        image_count=index.image_count,
        keys=len(index.images)
    )
    return index


def is_metadata_path(path: str) -> bool:
    """True for __MACOSX entries and anything hidden at any depth."""
    parts = [p for p in path.replace("\\", "/").split("/") if p]
    return any(p == MACOS_METADATA_DIR or p.startswith(".") for p in parts)


def image_key(path: str) -> str:
    """
    Base filename without its last extension.

    'photos/Fish Ball.JPG' -> 'Fish Ball'
    'a.b.png' -> 'a.b'
    'README' -> 'README'
    """
    basename = path.replace("\\", "/").split("/")[-1]
    stem, dot, _ = basename.rpartition(".")
    return stem if dot else basename


def _guess_mime(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    if mime and mime.startswith("image/"):
        return mime
    return DEFAULT_IMAGE_MIME

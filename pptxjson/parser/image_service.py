"""Resolve embedded image references to bytes.

Relationship ids are looked up in the slide's relationship map, resolved to a
part name relative to the slide part, and read from the package. Formats are
detected from magic numbers only; pixel dimensions are read with Pillow when
the bytes are decodable.
"""

import base64
import hashlib
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Optional, Union

from PIL import Image, UnidentifiedImageError

from pptxjson.dsl.schema import ImageData, ImageFormat, ImageProcessResult, Relationship
from pptxjson.parser.context import ProcessingContext
from pptxjson.parser.package import resolve_target


logger = logging.getLogger(__name__)

MIME_TYPES = {
    ImageFormat.PNG: "image/png",
    ImageFormat.JPEG: "image/jpeg",
    ImageFormat.GIF: "image/gif",
    ImageFormat.BMP: "image/bmp",
    ImageFormat.WEBP: "image/webp",
    ImageFormat.TIFF: "image/tiff",
    ImageFormat.UNKNOWN: "application/octet-stream",
}

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def detect_format(data: Optional[bytes]) -> tuple[ImageFormat, str]:
    """Classify bytes by their magic number.

    Returns:
        Tuple of (format, mime type). Unrecognized input is
        ``(ImageFormat.UNKNOWN, "application/octet-stream")``.
    """
    data = data or b""
    if data.startswith(PNG_SIGNATURE):
        image_format = ImageFormat.PNG
    elif data.startswith(b"\xff\xd8\xff"):
        image_format = ImageFormat.JPEG
    elif data.startswith((b"GIF87a", b"GIF89a")):
        image_format = ImageFormat.GIF
    elif data.startswith(b"BM"):
        image_format = ImageFormat.BMP
    elif len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        image_format = ImageFormat.WEBP
    elif data.startswith((b"II*\x00", b"MM\x00*")):
        image_format = ImageFormat.TIFF
    else:
        image_format = ImageFormat.UNKNOWN
    return image_format, MIME_TYPES[image_format]


def compute_hash(data: bytes) -> str:
    """Hex SHA-256 of the raw bytes."""
    return hashlib.sha256(data).hexdigest()


def read_dimensions(data: bytes) -> Optional[tuple[int, int]]:
    """Pixel (width, height) when Pillow can read the header, else None."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None


def build_image_data(data: bytes, filename: Optional[str] = None) -> ImageData:
    """Wrap raw bytes as ImageData with format, hash and dimensions."""
    image_format, mime_type = detect_format(data)
    dimensions = read_dimensions(data) if image_format != ImageFormat.UNKNOWN else None
    return ImageData(
        data=data,
        format=image_format,
        mime_type=mime_type,
        size=len(data),
        hash=compute_hash(data),
        width=dimensions[0] if dimensions else None,
        height=dimensions[1] if dimensions else None,
        filename=filename,
    )


def encode_to_base64(image_data: ImageData) -> str:
    """Render image bytes as a ``data:`` URL using the detected mime type."""
    encoded = base64.b64encode(image_data.data).decode("ascii")
    return f"data:{image_data.mime_type};base64,{encoded}"


RelationshipRef = Union[str, Relationship, dict[str, Any]]


def _relationship_target(relationship: Optional[RelationshipRef]) -> Optional[str]:
    """Target path of a relationship given as a path, record or dict."""
    if relationship is None:
        return None
    if isinstance(relationship, str):
        return relationship or None
    if isinstance(relationship, Relationship):
        return None if relationship.is_external else relationship.target
    if isinstance(relationship, dict):
        if relationship.get("target_mode", relationship.get("TargetMode")) == "External":
            return None
        target = relationship.get("target", relationship.get("Target"))
        return target if isinstance(target, str) and target else None
    return None


class ImageService:
    """Extracts embedded images for one engine instance."""

    def __init__(self, max_workers: int = 3):
        self.max_workers = max_workers

    def resolve_part_name(self, embed_id: str, context: ProcessingContext) -> Optional[str]:
        """Resolve an embed id to an absolute part name, or None."""
        target = _relationship_target(context.relationships.get(embed_id))
        if target is None:
            return None
        uri = resolve_target(context.slide_part, target)
        return str(uri) if uri is not None else None

    def extract_image_data(self, embed_id: str, context: ProcessingContext) -> Optional[ImageData]:
        """Read and describe the image behind ``embed_id``.

        Args:
            embed_id: Relationship id (``rId3``) from a ``blip r:embed``.
            context: Slide context holding the relationship map and package.

        Returns:
            ImageData, or None when the relationship or part is missing.
        """
        part_name = self.resolve_part_name(embed_id, context)
        if part_name is None:
            context.debug(f"No relationship target for image {embed_id}")
            return None

        data = context.package.read(part_name)
        if data is None:
            context.debug(f"Image part {part_name} not found in package")
            return None

        return build_image_data(data, filename=part_name.rsplit("/", 1)[-1])

    def extract_data_url(self, embed_id: str, context: ProcessingContext) -> Optional[str]:
        image_data = self.extract_image_data(embed_id, context)
        return encode_to_base64(image_data) if image_data is not None else None

    def raw_target(self, embed_id: str, context: ProcessingContext) -> str:
        """Best-effort raw relationship target (external links included), for fallbacks."""
        relationship = context.relationships.get(embed_id)
        if isinstance(relationship, Relationship):
            return relationship.target
        return _relationship_target(relationship) or ""

    def _process_one(self, embed_id: str, context: ProcessingContext) -> ImageProcessResult:
        try:
            image_data = self.extract_image_data(embed_id, context)
        except Exception as e:
            logger.warning(f"Image {embed_id} failed: {e}")
            return ImageProcessResult(success=False, error=str(e))
        if image_data is None:
            return ImageProcessResult(success=False, error=f"Image {embed_id} could not be resolved")
        return ImageProcessResult(
            success=True,
            image_data=image_data,
            data_url=encode_to_base64(image_data),
        )

    def process_batch(
        self,
        embed_ids: Iterable[str],
        context: ProcessingContext,
    ) -> dict[str, ImageProcessResult]:
        """Extract many images with at most ``max_workers`` in flight.

        Items are submitted in order and each worker slot is released when
        its item finishes or fails; a failure only affects its own entry.
        """
        ids = list(dict.fromkeys(embed_ids))
        if not ids:
            return {}

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="pptxjson-image") as pool:
            futures = {embed_id: pool.submit(self._process_one, embed_id, context) for embed_id in ids}
            return {embed_id: future.result() for embed_id, future in futures.items()}

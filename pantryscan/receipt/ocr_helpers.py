"""Image preparation and OCR detection helpers for receipt scanning."""

from __future__ import annotations

import io
from typing import Any

MAX_IMAGE_DIMENSION = 3000  # Resize if either dimension exceeds this
OCR_IMAGE_PADDING = 50  # White padding around image to prevent edge truncation
UPSCALE_FACTOR = 2

# Grayscale bands: darker than DARK is ink, lighter than LIGHT is paper,
# anything between is split at MIDPOINT.
DARK_THRESHOLD = 80
LIGHT_THRESHOLD = 180
MIDPOINT_THRESHOLD = 130

MIN_DETECTION_CONFIDENCE = 0.7
MIN_DETECTION_TEXT_LENGTH = 2
LINE_OVERLAP_RATIO = 0.5


def threshold_pixel(value: int) -> int:
    """Map a grayscale value to pure black or white."""
    if value < DARK_THRESHOLD:
        return 0
    if value > LIGHT_THRESHOLD:
        return 255
    return 255 if value > MIDPOINT_THRESHOLD else 0


def _fit_within(img: Any, max_dimension: int) -> Any:
    from PIL import Image

    width, height = img.size
    if width <= max_dimension and height <= max_dimension:
        return img
    scale = max_dimension / max(width, height)
    return img.resize((max(1, int(width * scale)), max(1, int(height * scale))), Image.Resampling.LANCZOS)


def binarize_image_bytes(image_bytes: bytes) -> bytes:
    """
    Upscale an image 2x and reduce it to black and white for OCR.

    Returns:
        PNG bytes of the binarized image.
    """
    from PIL import Image, ImageOps

    img = ImageOps.exif_transpose(Image.open(io.BytesIO(image_bytes)))
    width, height = img.size
    img = img.resize((width * UPSCALE_FACTOR, height * UPSCALE_FACTOR), Image.Resampling.NEAREST)
    img = img.convert("L").point(threshold_pixel)

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def prepare_image_bytes(
    image_bytes: bytes,
    max_dimension: int = MAX_IMAGE_DIMENSION,
    padding: int = OCR_IMAGE_PADDING,
    binarize: bool = True,
) -> bytes:
    """
    Prepare a receipt photo for the OCR service.

    Applies EXIF orientation, optional binarization, a size cap and a white
    border that keeps text at the edges from being truncated.

    Args:
        image_bytes: Image data as bytes
        max_dimension: Maximum allowed dimension (width or height)
        padding: White padding to add around image (pixels)
        binarize: Upscale and threshold before resizing

    Returns:
        JPEG bytes ready for upload
    """
    from PIL import Image, ImageOps

    if binarize:
        image_bytes = binarize_image_bytes(image_bytes)
    img = ImageOps.exif_transpose(Image.open(io.BytesIO(image_bytes)))
    img = _fit_within(img, max_dimension)
    if padding > 0:
        img = ImageOps.expand(img.convert("RGB"), border=padding, fill="white")

    buffer = io.BytesIO()
    img.convert("RGB").save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


def _overlaps_line(det: dict[str, Any], line: list[dict[str, Any]]) -> bool:
    line_min = min(d["y_min"] for d in line)
    line_max = max(d["y_max"] for d in line)
    overlap = min(det["y_max"], line_max) - max(det["y_min"], line_min)
    if overlap <= 0:
        return False
    smaller = min(det["y_max"] - det["y_min"], line_max - line_min)
    if smaller <= 0:
        return False
    return overlap / smaller >= LINE_OVERLAP_RATIO


def group_detections(detections: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
    """Group detections into text lines by vertical overlap, each sorted left to right."""
    lines: list[list[dict[str, Any]]] = []
    for det in sorted(detections, key=lambda d: (d["center_y"], d["min_x"])):
        if lines and _overlaps_line(det, lines[-1]):
            lines[-1].append(det)
        else:
            lines.append([det])
    for line in lines:
        line.sort(key=lambda d: d["min_x"])
    return lines


def transform_ocr_detections(raw_result: dict[str, Any], padding: int = OCR_IMAGE_PADDING) -> str:
    """
    Turn raw OCR detections into newline-separated text.

    Detections are ``[bbox, [text, confidence]]`` where bbox is four
    ``[x, y]`` points in padded-image coordinates. Low-confidence and
    very short detections are dropped as noise.
    """
    detection_data: list[dict[str, Any]] = []
    for detection in raw_result.get("detections", []):
        bbox, (text, confidence) = detection
        if confidence < MIN_DETECTION_CONFIDENCE:
            continue
        if len(text.strip()) < MIN_DETECTION_TEXT_LENGTH:
            continue

        xs = [point[0] - padding for point in bbox]
        ys = [point[1] - padding for point in bbox]
        detection_data.append(
            {
                "text": text.strip(),
                "center_y": sum(ys) / len(ys),
                "y_min": min(ys),
                "y_max": max(ys),
                "min_x": min(xs),
            }
        )

    return "\n".join(" ".join(det["text"] for det in line) for line in group_detections(detection_data))

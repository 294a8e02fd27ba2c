"""
Heatmap compositing.

Turns resolution-independent hotspots into a visible overlay on the base
thermogram. Each hotspot is painted as a radial red-orange-yellow ramp whose
overall opacity scales with its intensity, composited source-over in list
order on a surface sized to the image's native pixel dimensions.

High bit depth bases (16-bit radiometric PNGs, 32-bit integer or float
rasters) are scaled down to 8 bits for display before painting.
"""

import io
import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from thermoscan.infrastructure.constants.pipeline_constants import MAX_COMPOSITE_PIXELS
from thermoscan.schemas import Hotspot

logger = logging.getLogger(__name__)

# (offset, (r, g, b), alpha); fixed visual contract
GRADIENT_STOPS: Tuple[Tuple[float, Tuple[int, int, int], float], ...] = (
    (0.0, (255, 0, 0), 1.0),
    (0.3, (255, 165, 0), 0.6),
    (0.6, (255, 255, 0), 0.3),
    (1.0, (255, 255, 0), 0.0),
)

MIN_HOTSPOT_ALPHA = 0.3
HOTSPOT_ALPHA_SPAN = 0.6

PLACEHOLDER_SIZE = (300, 150)
PLACEHOLDER_FILL = (0, 0, 0)
PLACEHOLDER_TEXT_FILL = (255, 255, 255)
PLACEHOLDER_TEXT = "Image could not be loaded"

# 16-bit samples map to 8 bits the way browsers display them
HIGH_BIT_DEPTH_MODES = ("I;16", "I;16L", "I;16B", "I;16N", "I")
HIGH_BIT_DEPTH_SCALE = 257.0

# Modes returned as-is when there is nothing to paint
PNG_NATIVE_MODES = ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16")

ImageSource = Union[bytes, bytearray, Image.Image, None]


def hotspot_alpha(intensity: float) -> float:
    """Overall opacity of a hotspot ramp, in [0.3, 0.9]."""
    return MIN_HOTSPOT_ALPHA + HOTSPOT_ALPHA_SPAN * intensity


class HeatmapSurface:
    """
    8-bit RGBA raster with canvas-style source-over painting.

    ``global_alpha`` multiplies the alpha of everything painted while it is
    set, like a 2D canvas context. Blending runs in float32 on the bounding
    box of each fill only.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self.global_alpha = 1.0

    def draw_image(self, image: Image.Image) -> None:
        """Draw ``image`` unscaled at the origin, replacing the surface contents."""
        rgba = np.asarray(image.convert("RGBA"), dtype=np.uint8)
        self.pixels[: rgba.shape[0], : rgba.shape[1]] = rgba

    def fill_radial_gradient(
        self,
        cx: float,
        cy: float,
        radius: float,
        stops: Sequence[Tuple[float, Tuple[int, int, int], float]] = GRADIENT_STOPS,
    ) -> None:
        """Fill the disc of ``radius`` around (cx, cy) with a radial ramp."""
        if radius <= 0:
            return

        x0 = max(0, int(np.floor(cx - radius)))
        x1 = min(self.width, int(np.ceil(cx + radius)) + 1)
        y0 = max(0, int(np.floor(cy - radius)))
        y1 = min(self.height, int(np.ceil(cy + radius)) + 1)
        if x0 >= x1 or y0 >= y1:
            return

        # Sample at pixel centers
        xs = np.arange(x0, x1, dtype=np.float32) + 0.5
        ys = np.arange(y0, y1, dtype=np.float32) + 0.5
        dist = np.hypot(xs[np.newaxis, :] - cx, ys[:, np.newaxis] - cy) / radius
        inside = dist <= 1.0
        t = np.clip(dist, 0.0, 1.0)

        offsets = [stop[0] for stop in stops]
        src_rgb = np.stack(
            [
                np.interp(t, offsets, [stop[1][channel] / 255.0 for stop in stops])
                for channel in range(3)
            ],
            axis=-1,
        ).astype(np.float32)
        src_a = np.interp(t, offsets, [stop[2] for stop in stops]).astype(np.float32)
        src_a = np.where(inside, src_a * self.global_alpha, 0.0).astype(np.float32)

        painted = src_a > 0.0
        if not painted.any():
            return

        target = self.pixels[y0:y1, x0:x1]
        region = target.astype(np.float32) / 255.0
        dst_rgb = region[..., :3]
        dst_a = region[..., 3]

        out_a = src_a + dst_a * (1.0 - src_a)
        weight_dst = dst_a * (1.0 - src_a)
        safe_out_a = np.where(out_a > 0.0, out_a, 1.0)
        out_rgb = (
            src_rgb * src_a[..., np.newaxis] + dst_rgb * weight_dst[..., np.newaxis]
        ) / safe_out_a[..., np.newaxis]

        blended = np.concatenate([out_rgb, out_a[..., np.newaxis]], axis=-1)
        blended = np.rint(np.clip(blended, 0.0, 1.0) * 255.0).astype(np.uint8)
        target[painted] = blended[painted]

    def to_image(self, mode: str = "RGBA") -> Image.Image:
        image = Image.fromarray(self.pixels)
        return image if mode == "RGBA" else image.convert(mode)


def decode_image(source: ImageSource) -> Optional[Image.Image]:
    """
    Decode ``source`` into a fully loaded image.

    Returns None if it cannot be loaded or its pixel count exceeds
    ``MAX_COMPOSITE_PIXELS``. The size is checked from the header before any
    pixel data is decoded.
    """
    if source is None:
        return None
    try:
        image = source if isinstance(source, Image.Image) else Image.open(io.BytesIO(bytes(source)))
        width, height = image.size
        if width * height > MAX_COMPOSITE_PIXELS:
            logger.error(
                f"Image of {width}x{height} pixels exceeds the {MAX_COMPOSITE_PIXELS} pixel heatmap limit"
            )
            return None
        image.load()
        return image
    except (
        UnidentifiedImageError,
        OSError,
        ValueError,
        MemoryError,
        Image.DecompressionBombError,
    ) as e:
        logger.error(f"Failed to load image for heatmap: {e}")
        return None


def to_display_depth(image: Image.Image) -> Image.Image:
    """Scale high bit depth samples to an 8-bit grayscale image; other modes pass through."""
    if image.mode in HIGH_BIT_DEPTH_MODES:
        data = np.asarray(image, dtype=np.float32) / HIGH_BIT_DEPTH_SCALE
    elif image.mode == "F":
        data = np.asarray(image, dtype=np.float32)
    else:
        return image
    return Image.fromarray(np.rint(np.clip(data, 0.0, 255.0)).astype(np.uint8))


def _output_mode(image: Image.Image) -> str:
    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return "RGBA" if has_alpha else "RGB"


def render_placeholder() -> Image.Image:
    """Solid fill with centered "could not be loaded" text."""
    image = Image.new("RGB", PLACEHOLDER_SIZE, PLACEHOLDER_FILL)
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), PLACEHOLDER_TEXT, font=font)
    x = (PLACEHOLDER_SIZE[0] - (right - left)) / 2 - left
    y = (PLACEHOLDER_SIZE[1] - (bottom - top)) / 2 - top
    draw.text((x, y), PLACEHOLDER_TEXT, fill=PLACEHOLDER_TEXT_FILL, font=font)
    return image


def _paint(image: Image.Image, hotspots: Sequence[Hotspot]) -> Image.Image:
    image = to_display_depth(image)
    mode = _output_mode(image)

    width, height = image.size
    surface = HeatmapSurface(width, height)
    surface.draw_image(image)

    try:
        for hotspot in hotspots:
            # Radius is relative to width even for non-square images
            cx = hotspot.x / 100.0 * width
            cy = hotspot.y / 100.0 * height
            radius = hotspot.radius / 100.0 * width

            surface.global_alpha = hotspot_alpha(hotspot.intensity)
            surface.fill_radial_gradient(cx, cy, radius)
    finally:
        surface.global_alpha = 1.0

    return surface.to_image(mode)


def composite(base_image: ImageSource, hotspots: Iterable[Hotspot]) -> Image.Image:
    """
    Composite hotspots onto the base image.

    Args:
        base_image: Encoded image bytes, a PIL image, or None
        hotspots: Hotspots in image-relative percentages, painted in order

    Returns:
        A new image with the base's native dimensions, or the placeholder
        if the base cannot be decoded or rendered
    """
    image = decode_image(base_image)
    if image is None:
        return render_placeholder()

    hotspots = list(hotspots)
    try:
        if not hotspots:
            if image.mode in PNG_NATIVE_MODES:
                return image.copy()
            display = to_display_depth(image)
            return display.convert(_output_mode(display))
        return _paint(image, hotspots)
    except MemoryError as e:
        logger.error(f"Not enough memory to render heatmap: {e}")
        return render_placeholder()


def render_png(base_image: ImageSource, hotspots: Iterable[Hotspot]) -> bytes:
    """Composite and encode the result as PNG."""
    buffer = io.BytesIO()
    composite(base_image, hotspots).save(buffer, format="PNG")
    return buffer.getvalue()


class HeatmapCompositor:
    """Object facade over :func:`composite` for dependency injection."""

    def composite(self, base_image: ImageSource, hotspots: Iterable[Hotspot]) -> Image.Image:
        return composite(base_image, hotspots)

    def render_png(self, base_image: ImageSource, hotspots: Iterable[Hotspot]) -> bytes:
        return render_png(base_image, hotspots)

"""Image variant generation using Pillow.

Pillow work is CPU bound and runs in worker threads so that variant specs
can be rendered concurrently without blocking the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO

from PIL import Image, ImageOps

from media_provider.core.config import ProviderConfig, ResizeOptions
from media_provider.core.enums import WEBP_CONTENT_TYPE, WEBP_EXTENSION, ImageFormat
from media_provider.core.exceptions import ImageProcessingError
from media_provider.services.storage import GeneratedVariant, MediaFile

logger = logging.getLogger(__name__)

RESAMPLE = Image.Resampling.LANCZOS

# Pillow format names the original-optimizing pass re-encodes with quality
PILLOW_FORMATS = {fmt.pillow_format: fmt for fmt in ImageFormat}

DECODE_ERRORS = (OSError, ValueError, Image.DecompressionBombError)

# Position name -> Pillow centering (x, y)
CENTERING = {
    "centre": (0.5, 0.5),
    "center": (0.5, 0.5),
    "top": (0.5, 0.0),
    "north": (0.5, 0.0),
    "right top": (1.0, 0.0),
    "northeast": (1.0, 0.0),
    "right": (1.0, 0.5),
    "east": (1.0, 0.5),
    "right bottom": (1.0, 1.0),
    "southeast": (1.0, 1.0),
    "bottom": (0.5, 1.0),
    "south": (0.5, 1.0),
    "left bottom": (0.0, 1.0),
    "southwest": (0.0, 1.0),
    "left": (0.0, 0.5),
    "west": (0.0, 0.5),
    "left top": (0.0, 0.0),
    "northwest": (0.0, 0.0),
}


def _target_size(
    source: tuple[int, int],
    width: int | None,
    height: int | None,
) -> tuple[int, int]:
    """Fill in a missing dimension proportionally."""
    src_w, src_h = source
    if width is None and height is not None:
        width = max(1, round(src_w * height / src_h))
    elif height is None and width is not None:
        height = max(1, round(src_h * width / src_w))
    return width, height  # type: ignore[return-value]


def resize_image(image: Image.Image, options: ResizeOptions) -> Image.Image:
    """Resize an image according to ``options``.

    Fit modes:
    - cover: scale and centre-crop to exactly the target size
    - contain: scale to fit inside the target, pad the remainder
    - fill: stretch to the target size, ignoring aspect ratio
    - inside: scale to fit inside the target, preserving aspect ratio
    - outside: scale to cover the target, preserving aspect ratio

    With only one dimension set, the other follows the aspect ratio and the
    fit mode has no effect. ``position`` anchors the cover crop and the
    contain padding; ``background`` colours the contain padding.
    ``without_enlargement`` leaves the image untouched whenever the fit mode
    would scale it up.
    """
    if options.is_noop:
        return image

    single_dimension = options.width is None or options.height is None
    width, height = _target_size(image.size, options.width, options.height)
    src_w, src_h = image.size

    if options.without_enlargement and _scale_factor(
        (src_w, src_h), (width, height), options.fit, single_dimension
    ) > 1:
        return image

    centering = CENTERING[options.position]
    if single_dimension or options.fit == "fill":
        return image.resize((width, height), RESAMPLE)
    if options.fit == "cover":
        return ImageOps.fit(image, (width, height), method=RESAMPLE, centering=centering)
    if options.fit == "contain":
        return ImageOps.pad(
            image,
            (width, height),
            method=RESAMPLE,
            color=_pad_color(image, options.background),
            centering=centering,
        )
    if options.fit == "inside":
        return ImageOps.contain(image, (width, height), method=RESAMPLE)

    # outside
    scale = max(width / src_w, height / src_h)
    return image.resize((max(1, round(src_w * scale)), max(1, round(src_h * scale))), RESAMPLE)


def _scale_factor(
    source: tuple[int, int],
    target: tuple[int, int],
    fit: str,
    single_dimension: bool,
) -> float:
    """Largest scale the fit mode applies to the source."""
    ratios = (target[0] / source[0], target[1] / source[1])
    if fit in ("inside", "contain") and not single_dimension:
        return min(ratios)
    # cover, outside and fill enlarge if either axis grows
    return max(ratios)


def _pad_color(image: Image.Image, background: str | list[int] | None) -> str | tuple[int, ...] | None:
    if background is not None:
        return background if isinstance(background, str) else tuple(background)
    return (0, 0, 0, 0) if "A" in image.getbands() else None


def encode_image(image: Image.Image, fmt: ImageFormat, quality: int) -> bytes:
    """Encode an image in ``fmt``."""
    output = BytesIO()
    if fmt is ImageFormat.JPEG:
        if image.mode not in ("RGB", "L", "CMYK"):
            image = image.convert("RGB")
        image.save(output, format="JPEG", quality=quality, optimize=True)
    elif fmt is ImageFormat.PNG:
        # PNG is lossless; quality does not apply
        image.save(output, format="PNG", optimize=True)
    else:
        image.save(output, format="WEBP", quality=quality)
    return output.getvalue()


def render_variant(
    data: bytes,
    options: ResizeOptions,
    fmt: ImageFormat,
    quality: int,
) -> bytes:
    """Decode, resize and re-encode image bytes.

    Raises:
        ImageProcessingError: If Pillow cannot process the data.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            return encode_image(resize_image(image, options), fmt, quality)
    except DECODE_ERRORS as e:
        raise ImageProcessingError(f"Failed to render {fmt.value} variant: {e}", cause=e) from e


def optimize_original(data: bytes, options: ResizeOptions, quality: int) -> bytes:
    """Resize an original and re-encode it in its own format.

    PNG, JPEG and WebP data are re-encoded with ``quality``; any other
    format Pillow recognises is written back in that format.

    Raises:
        ImageProcessingError: If Pillow cannot process the data.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            source_format = image.format
            resized = resize_image(image, options)
            if fmt := PILLOW_FORMATS.get(source_format or ""):
                return encode_image(resized, fmt, quality)
            output = BytesIO()
            resized.save(output, format=source_format)
            return output.getvalue()
    except DECODE_ERRORS as e:
        raise ImageProcessingError(f"Failed to optimize image: {e}", cause=e) from e


class ImageVariantGenerator:
    """Produces the configured variants of an original image."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config

    @property
    def quality(self) -> int:
        return self._config.quality

    async def generate(self, file: MediaFile) -> list[list[GeneratedVariant]]:
        """Render every configured variant spec of ``file``.

        Specs are rendered concurrently. Each inner list holds the variant in
        the original's format first (when that format is supported) and the
        WebP sibling second (when enabled and the original is not WebP).

        Raises:
            ImageProcessingError: If any variant fails; no partial results.
        """
        specs = self._config.thumbnails or []
        batches = await asyncio.gather(
            *(self._generate_spec(file, spec.name, spec.options) for spec in specs)
        )
        return list(batches)

    async def _generate_spec(
        self,
        file: MediaFile,
        name: str,
        options: ResizeOptions | None,
    ) -> list[GeneratedVariant]:
        options = options or ResizeOptions()
        images: list[GeneratedVariant] = []

        if fmt := ImageFormat.from_extension(file.ext):
            data = await asyncio.to_thread(render_variant, file.buffer, options, fmt, self.quality)
            images.append(GeneratedVariant(buffer=data, mime=file.mime, ext=file.ext, name=name))

        if self._config.webp and file.mime != WEBP_CONTENT_TYPE:
            data = await asyncio.to_thread(
                render_variant, file.buffer, options, ImageFormat.WEBP, self.quality
            )
            images.append(
                GeneratedVariant(
                    buffer=data,
                    mime=WEBP_CONTENT_TYPE,
                    ext=WEBP_EXTENSION,
                    name=name,
                )
            )

        logger.debug(f"Generated {len(images)} image(s) for variant {name} of {file.hash}")
        return images

    async def optimize(self, file: MediaFile) -> bytes:
        """Re-encode the original against the ``optimize`` resize options."""
        options = self._config.optimize or ResizeOptions()
        return await asyncio.to_thread(optimize_original, file.buffer, options, self.quality)

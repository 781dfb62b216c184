"""Write canvases as static PNG or animated PNG (APNG) files with Pillow."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

from PIL import Image

from frm_toolbox.core.datatypes import ImageData
from frm_toolbox.core.exceptions import ToolError
from frm_toolbox.tools.frm_converter._canvas import Canvas
from frm_toolbox.tools.frm_converter.layout import BLEND_SOURCE, DISPOSE_NONE, Animation

logger = logging.getLogger(__name__)

# APNG: a zero delay denominator means 1/100 s units.
_APNG_DEFAULT_DEN = 100


def delay_to_ms(delay_num: int, delay_den: int) -> float:
    """Convert an APNG ``num/den`` seconds delay into milliseconds."""
    den = delay_den or _APNG_DEFAULT_DEN
    return 1000.0 * delay_num / den


def write_png(canvas: Canvas, path: Path) -> ImageData:
    """Save *canvas* as a static RGBA PNG.

    Args:
        canvas: The image to write.
        path: Destination file; parent directories are created.

    Returns:
        An ``ImageData`` describing the written file.

    Raises:
        ToolError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("write png = %s = %dx%d", path, canvas.width, canvas.height)
    try:
        canvas.to_image().save(str(path), format="PNG")
    except (OSError, ValueError) as exc:
        msg = f"Failed to save PNG to '{path}'"
        raise ToolError(msg) from exc
    return ImageData(path=path, width=canvas.width, height=canvas.height, format="png")


class AnimationWriter:
    """Collects animation frames and writes them as one APNG file.

    Frames are announced up front, appended one by one with their position
    and timing, and encoded on ``close()``.

    Args:
        path: Destination file.
        width: Animation canvas width.
        height: Animation canvas height.
        frame_count: Number of images that will be appended, preview included.
        loop: Number of plays, 0 for infinite.
        first_frame_is_preview: Treat the first image as the still default
            image that is not part of the animation.
    """

    def __init__(
        self,
        path: Path,
        width: int,
        height: int,
        frame_count: int,
        loop: int = 0,
        first_frame_is_preview: bool = True,
    ) -> None:
        if width <= 0 or height <= 0:
            msg = f"Animation size must be positive, got {width}x{height}"
            raise ToolError(msg)
        self.path = path
        self.width = width
        self.height = height
        self.frame_count = frame_count
        self.loop = loop
        self.first_frame_is_preview = first_frame_is_preview
        self._images: list[Image.Image] = []
        self._durations: list[float] = []
        self._disposals: list[int] = []
        self._blends: list[int] = []
        self._closed = False

    def __enter__(self) -> AnimationWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        # Nothing is written when the block failed.
        if exc_type is None and not self._closed:
            self.close()

    def append_frame(
        self,
        canvas: Canvas,
        x: int = 0,
        y: int = 0,
        delay_num: int = 0,
        delay_den: int = 0,
        dispose: int = DISPOSE_NONE,
        blend: int = BLEND_SOURCE,
    ) -> None:
        """Queue one image at ``(x, y)`` on the animation canvas.

        Raises:
            ToolError: If more frames than announced are appended, or the
                image does not fit the animation canvas at its position.
        """
        if self._closed:
            msg = f"Animation '{self.path}' is already closed"
            raise ToolError(msg)
        if len(self._images) >= self.frame_count:
            msg = f"Animation '{self.path}' announced {self.frame_count} frames, got more"
            raise ToolError(msg)
        if x < 0 or y < 0 or x + canvas.width > self.width or y + canvas.height > self.height:
            msg = (
                f"Frame {canvas.width}x{canvas.height} at ({x}, {y}) does not fit "
                f"the {self.width}x{self.height} animation"
            )
            raise ToolError(msg)

        is_preview = self.first_frame_is_preview and not self._images
        if canvas.size == (self.width, self.height):
            image = canvas.to_image()
        else:
            image = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
            image.paste(canvas.to_image(), (x, y))
        self._images.append(image)

        if not is_preview:
            self._durations.append(delay_to_ms(delay_num, delay_den))
            self._disposals.append(dispose)
            self._blends.append(blend)

    def close(self) -> ImageData:
        """Encode and write the APNG file.

        Returns:
            An ``ImageData`` describing the written file.

        Raises:
            ToolError: If fewer frames than announced were appended or the
                file cannot be written.
        """
        if len(self._images) != self.frame_count:
            msg = f"Animation '{self.path}' announced {self.frame_count} frames, got {len(self._images)}"
            raise ToolError(msg)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("write apng = %s = %dx%d, %d frames", self.path, self.width, self.height, self.frame_count)

        first, *rest = self._images
        try:
            first.save(
                str(self.path),
                format="PNG",
                save_all=True,
                append_images=rest,
                default_image=self.first_frame_is_preview,
                duration=self._durations,
                disposal=self._disposals,
                blend=self._blends,
                loop=self.loop,
            )
        except (OSError, ValueError) as exc:
            msg = f"Failed to save APNG to '{self.path}'"
            raise ToolError(msg) from exc
        finally:
            self._closed = True

        return ImageData(
            path=self.path,
            width=self.width,
            height=self.height,
            format="png",
            frame_count=self.frame_count,
        )


def write_animation(animation: Animation, path: Path) -> ImageData:
    """Write an ``Animation`` (preview first, if any) as an APNG file."""
    writer = AnimationWriter(
        path,
        animation.width,
        animation.height,
        animation.frame_count,
        loop=animation.loop,
        first_frame_is_preview=animation.preview is not None,
    )
    if animation.preview is not None:
        writer.append_frame(animation.preview)
    for step in animation.steps:
        writer.append_frame(
            step.canvas,
            step.x,
            step.y,
            step.delay_num,
            step.delay_den,
            step.dispose,
            step.blend,
        )
    return writer.close()

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import io
from typing import Protocol, TypeVar

import numpy as np
from PIL import Image
import torch

from .errors import InputContractViolation
from .geometry.outline import Outline, Size


class ImageOrientation(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    UP_MIRRORED = "up_mirrored"
    DOWN_MIRRORED = "down_mirrored"
    LEFT_MIRRORED = "left_mirrored"
    RIGHT_MIRRORED = "right_mirrored"


ImageT = TypeVar("ImageT", bound="ImageWithOutline")


class ImageWithOutline(Protocol):
    """Minimal capability synthesis needs from an image type."""

    @property
    def pixels(self) -> torch.Tensor:
        ...

    @property
    def outline(self) -> Outline:
        ...

    @classmethod
    def from_raster(
        cls: type[ImageT],
        pixels: torch.Tensor,
        outline: Outline,
        scale: float,
        orientation: ImageOrientation,
    ) -> ImageT:
        ...


@dataclass(frozen=True, eq=False)
class ShapedImage:
    """Raster RGBA pixels paired with the outline that produced them.

    `pixels` is a `(H, W, 4)` uint8 tensor with straight alpha. The outline is
    in logical units; multiply by `scale` to land in pixel space.
    """

    pixels: torch.Tensor
    outline: Outline
    scale: float
    orientation: ImageOrientation = ImageOrientation.UP

    def __post_init__(self) -> None:
        if self.pixels.dim() != 3 or self.pixels.shape[2] != 4:
            raise InputContractViolation("pixels must be shaped (H, W, 4)")
        if self.pixels.dtype != torch.uint8:
            raise InputContractViolation("pixels must be uint8")
        if self.scale <= 0:
            raise InputContractViolation("scale must be > 0")

    @classmethod
    def from_raster(
        cls,
        pixels: torch.Tensor,
        outline: Outline,
        scale: float,
        orientation: ImageOrientation,
    ) -> ShapedImage:
        return cls(pixels=pixels, outline=outline, scale=scale, orientation=orientation)

    @property
    def pixel_width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def pixel_height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Size:
        return Size(self.pixel_width / self.scale, self.pixel_height / self.scale)

    @property
    def is_opaque(self) -> bool:
        return bool(torch.all(self.pixels[:, :, 3] == 255).item())

    def contains_point(self, x: float, y: float) -> bool:
        return self.outline.contains(x, y)

    def to_numpy(self) -> np.ndarray:
        return self.pixels.cpu().numpy().copy()

    def to_pil(self) -> Image.Image:
        img = Image.fromarray(self.to_numpy())
        if self.is_opaque:
            return img.convert("RGB")
        return img

    def to_png_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.to_pil().save(buf, format="PNG", dpi=(72.0 * self.scale, 72.0 * self.scale))
        return buf.getvalue()

"""
Pixel buffer model for the Braille recognition pipeline.

A PixelBuffer is the decoded image handed to the core by the caller:
width, height and one RGBA sample per pixel. The core never mutates it.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

CHANNELS = 4


class InvalidInputError(ValueError):
    """Raised when a pixel buffer is inconsistent with its declared size or holds non-integer samples."""


@dataclass(frozen=True)
class PixelBuffer:
    """Immutable RGBA image, stored as a read-only (height, width, 4) uint8 array."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise InvalidInputError(
                f"Negative buffer dimensions: {self.width}x{self.height}"
            )

        data = np.asarray(self.data)
        expected = (self.height, self.width, CHANNELS)
        if data.shape != expected:
            raise InvalidInputError(
                f"Pixel data shape {data.shape} does not match {expected}"
            )
        if data.dtype.kind not in "biu":
            raise InvalidInputError(
                f"Pixel samples must be integers, got dtype {data.dtype}"
            )
        if data.size and (data.min() < 0 or data.max() > 255):
            raise InvalidInputError("Pixel samples must be in the range 0-255")

        # Private read-only copy
        data = np.array(data, dtype=np.uint8, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @property
    def shape(self):
        return (self.height, self.width)

    @classmethod
    def from_flat(
        cls,
        width: int,
        height: int,
        samples: Union[Sequence[int], bytes, np.ndarray]
    ) -> "PixelBuffer":
        """
        Build a buffer from a flat RGBA sample sequence.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            samples: width * height * 4 samples, row-major, RGBA order

        Returns:
            PixelBuffer

        Raises:
            InvalidInputError: If the sample count does not match width x height
        """
        if isinstance(samples, (bytes, bytearray)):
            flat = np.frombuffer(samples, dtype=np.uint8)
        else:
            flat = np.asarray(samples)
            if flat.size == 0:
                flat = flat.astype(np.uint8)

        if flat.ndim != 1:
            raise InvalidInputError(f"Expected a flat sample sequence, got shape {flat.shape}")

        expected = width * height * CHANNELS
        if width < 0 or height < 0 or flat.size != expected:
            raise InvalidInputError(
                f"Expected {expected} samples for {width}x{height} RGBA, got {flat.size}"
            )

        return cls(width=width, height=height, data=flat.reshape(height, width, CHANNELS))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an (H, W, 4) RGBA or (H, W, 3) RGB array.

        RGB input gets an opaque alpha channel.
        """
        array = np.asarray(array)

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise InvalidInputError(f"Unexpected image shape: {array.shape}")

        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.promote_types(array.dtype, np.uint8))
            array = np.concatenate([array, alpha], axis=2)

        height, width = array.shape[:2]
        return cls(width=width, height=height, data=array)

    @classmethod
    def filled(cls, width: int, height: int, rgba: Sequence[int] = (255, 255, 255, 255)) -> "PixelBuffer":
        """Create a buffer where every pixel has the same colour."""
        data = np.empty((height, width, CHANNELS), dtype=np.uint8)
        data[:, :] = rgba
        return cls(width=width, height=height, data=data)

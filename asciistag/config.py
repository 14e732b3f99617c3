"""Settings and per-run render parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from pydantic_settings import BaseSettings

from .errors import ValidationError
from .interpolation import InterpolationMethod


class Settings(BaseSettings):
    """Application settings, overridable via ASCIISTAG_* environment variables."""

    # Rendering defaults
    DEFAULT_RAMP: str = " .:-=+*#%@"
    ASPECT_RATIO: float = 2.0  # Glyph cell correction factor applied to rows
    DEFAULT_FRAME_DELAY_MS: float = 100.0  # Used when the source fps is unknown

    # Terminal
    FALLBACK_TERMINAL_WIDTH: int = 80
    FALLBACK_TERMINAL_HEIGHT: int = 24

    # Scale limits
    MIN_SCALE: float = 0.01
    MAX_SCALE: float = 10000.0
    MAX_TARGET_PIXELS: int = 4096 * 4096  # Largest resampled frame

    # Misc
    LOG_LEVEL: str = "WARNING"
    URL_TIMEOUT: float = 30.0  # Seconds

    model_config = {"env_prefix": "ASCIISTAG_"}


settings = Settings()


@dataclass(frozen=True)
class RenderParams:
    """Configuration for a single conversion run.

    Immutable once created; call :meth:`validate` before using values
    that came from the command line.
    """

    # Locations
    input_path: str = ""
    output_path: str | None = None

    # Glyph selection
    ramp: str = field(default_factory=lambda: settings.DEFAULT_RAMP)
    color: bool = False
    invert: bool = False  # Invert brightness -> glyph mapping
    invert_colors: bool = False  # Invert emitted RGB channels
    brightness: float = 1.0
    edges: bool = False

    # Geometry
    scale: float = 1.0
    aspect_ratio: float = field(default_factory=lambda: settings.ASPECT_RATIO)
    auto_fit: bool = False
    block_width: int = 1
    block_height: int = 1
    interpolation: InterpolationMethod = InterpolationMethod.NEAREST

    # Playback
    frame_delay_ms: float | None = None  # None = derive from source fps

    @property
    def block_mode(self) -> bool:
        """Whether glyphs are produced per block rather than per pixel."""
        return self.block_width > 1 or self.block_height > 1

    def validate(self) -> "RenderParams":
        """Check all values, raising ValidationError for the first bad one.

        :return: self, to allow chaining
        """
        if not self.input_path:
            raise ValidationError("Input image path required")
        if not self.ramp:
            raise ValidationError("Character ramp must not be empty")
        if not _positive(self.scale):
            raise ValidationError(f"Scale must be positive, got {self.scale}")
        if not _positive(self.aspect_ratio):
            raise ValidationError(
                f"Aspect ratio must be positive, got {self.aspect_ratio}"
            )
        if not (math.isfinite(self.brightness) and self.brightness >= 0):
            raise ValidationError(
                f"Brightness must be zero or positive, got {self.brightness}"
            )
        if self.block_width < 1 or self.block_height < 1:
            raise ValidationError(
                f"Block size must be positive, got "
                f"{self.block_width}x{self.block_height}"
            )
        if self.frame_delay_ms is not None and not (
            math.isfinite(self.frame_delay_ms) and self.frame_delay_ms >= 0
        ):
            raise ValidationError(
                f"Frame delay must be zero or positive, got {self.frame_delay_ms}"
            )
        return self


def _positive(value: float) -> bool:
    return math.isfinite(value) and value > 0


__all__ = ["Settings", "settings", "RenderParams"]

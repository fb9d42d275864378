"""
Exception types raised by the sprite atlas builder.

Every error carries an exit code so the command line scripts can tell
input problems (1) apart from internal consistency failures (3).
"""

from typing import Optional


class SpriteBuildError(Exception):
    """Base class for all sprite build failures."""

    exit_code = 1


class ConfigurationError(SpriteBuildError):
    """Missing source directories, basemap configuration or an empty sprite set."""


class TemplateError(SpriteBuildError):
    """A shield template and its theme parameters do not match."""


class RasterizationError(SpriteBuildError):
    """A vector document could not be rendered."""

    def __init__(self, message: str, sprite: Optional[str] = None, pixel_ratio: Optional[int] = None):
        self.sprite = sprite
        self.pixel_ratio = pixel_ratio
        if sprite is not None:
            where = sprite if pixel_ratio is None else f"{sprite} @{pixel_ratio}x"
            message = f"{where}: {message}"
        super().__init__(message)


class ConsistencyError(SpriteBuildError):
    """Tier outputs disagree with each other; indicates a packer bug, not bad input."""

    exit_code = 3


class OutputError(SpriteBuildError):
    """A tier's image/index pair could not be written to the output directory."""

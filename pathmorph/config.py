"""Runtime configuration.

Every tunable constant of the geometry core lives here. Values can be
overridden with ``PATHMORPH_*`` environment variables or a ``.env`` file,
and every public function also accepts explicit keyword overrides.
"""

import math
from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class ReorientPolicy(str, Enum):
    """What the shape matcher does with the end-to-end orientation check."""

    KEEP = "keep"  # Compare orientations, never reverse
    NEAREST = "nearest"  # Reverse a piece when its ends line up better that way


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Priority: environment variables > .env file > defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="PATHMORPH_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Corner tagging
    corner_threshold_degrees: float = 0.5  # smaller bends count as smooth

    # Shape matching
    corner_neighbor_weight: float = 0.1  # priority discount next to a corner
    reorient_policy: ReorientPolicy = ReorientPolicy.KEEP

    # Rendering
    render_width: int = 800
    render_height: int = 600
    render_background: str = "#000000"
    stroke_width: float = 4.0
    curve_flatten_steps: int = 16  # polyline samples per curved segment

    @property
    def corner_threshold(self) -> float:
        """Corner threshold in radians."""
        return math.radians(self.corner_threshold_degrees)


settings = Settings()

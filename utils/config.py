"""
Configuration management.
"""

import os
from dataclasses import dataclass, field


@dataclass
class Config:
    """
    Engine configuration.

    Loads from environment variables with sensible defaults.
    """

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Repair costs
    regional_multiplier: float = field(
        default_factory=lambda: float(os.getenv("REGIONAL_MULTIPLIER", "1.0"))
    )

    # Margin targets
    target_margin: float = field(
        default_factory=lambda: float(os.getenv("TARGET_MARGIN", "0.25"))
    )
    preferred_margin: float = field(
        default_factory=lambda: float(os.getenv("PREFERRED_MARGIN", "0.35"))
    )

    # Market trends
    trend_window_days: int = field(
        default_factory=lambda: int(os.getenv("TREND_WINDOW_DAYS", "90"))
    )

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.regional_multiplier <= 0:
            raise ValueError("regional_multiplier must be positive")
        if self.target_margin > self.preferred_margin:
            raise ValueError("target_margin must be <= preferred_margin")
        if self.trend_window_days <= 0:
            raise ValueError("trend_window_days must be positive")

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "log_level": self.log_level,
            "regional_multiplier": self.regional_multiplier,
            "target_margin": self.target_margin,
            "preferred_margin": self.preferred_margin,
            "trend_window_days": self.trend_window_days,
        }

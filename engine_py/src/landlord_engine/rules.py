"""
Game rule configuration and validation.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_ROOM_NAME


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    room_name: str = Field(
        default=DEFAULT_ROOM_NAME,
        min_length=1,
        max_length=50,
        description="Display name of the room"
    )
    max_players: int = Field(
        default=3,
        ge=3,
        le=3,
        description="Seats per room; the game is strictly three-handed"
    )
    hand_size: int = Field(
        default=17,
        ge=1,
        description="Cards dealt to each seat"
    )
    bottom_size: int = Field(
        default=3,
        ge=0,
        description="Cards withheld for the landlord"
    )
    base_landlord: int = Field(
        default=2,
        ge=1,
        description="Landlord stake before the multiplier"
    )
    base_farmer: int = Field(
        default=1,
        ge=1,
        description="Per-farmer stake before the multiplier"
    )
    reveal_after_passes: int = Field(
        default=3,
        ge=1,
        description="Passes before every hand is revealed"
    )
    forced_after_passes: int = Field(
        default=2,
        ge=1,
        description="Passes after the reveal before the next seat is forced"
    )
    pause_timeout: int = Field(
        default=60,
        ge=0,
        le=3600,
        description="Countdown in seconds shown to clients while paused"
    )
    enforce_pause_timeout: bool = Field(
        default=False,
        description="Reset the room when the pause countdown runs out"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Deterministic shuffle seed (tests and replays)"
    )

    @field_validator('bottom_size')
    @classmethod
    def validate_bottom_size(cls, v, info):
        """A full deck must cover every hand plus the bottom cards."""
        hand_size = info.data.get('hand_size', 17)
        if hand_size * 3 + v > 54:
            raise ValueError(
                f'hand_size ({hand_size}) x 3 + bottom_size ({v}) exceeds a 54-card deck'
            )
        return v

    def get_deck_size(self) -> int:
        """Get the number of cards used in a round."""
        return self.hand_size * self.max_players + self.bottom_size

    def landlord_stake(self, multiplier: int) -> int:
        return self.base_landlord * multiplier

    def farmer_stake(self, multiplier: int) -> int:
        return self.base_farmer * multiplier


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


def rules_from_env(environ=None) -> RuleConfig:
    """Build rules from LANDLORD_* environment variables."""
    environ = os.environ if environ is None else environ
    overrides = {}
    if environ.get("LANDLORD_ROOM_NAME"):
        overrides["room_name"] = environ["LANDLORD_ROOM_NAME"]
    if environ.get("LANDLORD_PAUSE_TIMEOUT"):
        overrides["pause_timeout"] = int(environ["LANDLORD_PAUSE_TIMEOUT"])
    if environ.get("LANDLORD_ENFORCE_PAUSE"):
        overrides["enforce_pause_timeout"] = environ["LANDLORD_ENFORCE_PAUSE"].lower() == "true"
    if environ.get("LANDLORD_SEED"):
        overrides["seed"] = int(environ["LANDLORD_SEED"])
    return create_rules(**overrides)

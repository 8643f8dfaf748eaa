"""
Game rule configuration and validation.
"""

from typing import Dict

from pydantic import BaseModel, Field, field_validator

from .constants import (
    BURN_BELOW_PLAYERS, DEFAULT_TOKENS_TO_WIN, MAX_PLAYERS, MIN_PLAYERS,
    TOKENS_TO_WIN
)


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    min_players: int = Field(
        default=MIN_PLAYERS,
        ge=MIN_PLAYERS,
        le=MAX_PLAYERS,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=MAX_PLAYERS,
        ge=MIN_PLAYERS,
        le=MAX_PLAYERS,
        description="Maximum number of players allowed"
    )
    burn_below: int = Field(
        default=BURN_BELOW_PLAYERS,
        ge=MIN_PLAYERS,
        le=MAX_PLAYERS + 1,
        description="A card is burned face down when fewer players than this are seated"
    )
    tokens_to_win: Dict[int, int] = Field(
        default_factory=lambda: dict(TOKENS_TO_WIN),
        description="Tokens needed to win the match, keyed by player count"
    )
    winner_starts_round: bool = Field(
        default=False,
        description="Previous round winner leads the next round instead of seat 0"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below minimum."""
        min_players = info.data.get('min_players', MIN_PLAYERS)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    @field_validator('tokens_to_win')
    @classmethod
    def validate_tokens_to_win(cls, v):
        for player_count, tokens in v.items():
            if tokens < 1:
                raise ValueError(f'tokens_to_win[{player_count}] must be positive')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players

    def get_tokens_to_win(self, player_count: int) -> int:
        """Get the match-winning token threshold for a player count."""
        return self.tokens_to_win.get(player_count, DEFAULT_TOKENS_TO_WIN)

    def should_burn(self, player_count: int) -> bool:
        return player_count < self.burn_below


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)

# settings.py
# Runtime configuration for the 2048 game, read from GAME2048_* environment variables or a .env file.

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings shared by the API and the CLI driver.
    """

    model_config = SettingsConfigDict(env_prefix="GAME2048_", env_file=".env", env_file_encoding="utf-8")

    board_size: int = Field(default=4, gt=1, description="Dimension N of the N x N board.")
    win_tile: int = Field(default=2048, gt=0, description="Tile value that wins the game.")
    spawn_four_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Chance that a spawned tile is a 4 instead of a 2.",
    )
    data_dir: Path = Field(
        default=Path.home() / ".game2048",
        description="Directory holding the best score and highscore files.",
    )
    max_games: int = Field(default=1000, gt=0, description="Games the API keeps before dropping the least recently used.")
    rate_limit: str = Field(default="100/minute", description="slowapi rate limit applied to each endpoint.")
    log_level: str = Field(default="INFO", description="Root logger level.")

    @property
    def best_score_path(self) -> Path:
        return self.data_dir / "best_score.json"

    @property
    def highscores_path(self) -> Path:
        return self.data_dir / "highscores.json"


settings = Settings()

"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from bubbleset.engine.config import BubbleConfig


class Settings(BaseSettings):
    bubbleset_env: str = "development"
    bubbleset_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Default canvas and sampling for new sessions
    canvas_width: float = 800.0
    canvas_height: float = 600.0
    grid_spacing: float = 6.0

    # Oldest sessions are dropped beyond this many
    max_sessions: int = 64

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def engine_config(self, width: float | None = None, height: float | None = None) -> BubbleConfig:
        return BubbleConfig(
            canvas_width=width if width is not None else self.canvas_width,
            canvas_height=height if height is not None else self.canvas_height,
            grid_spacing=self.grid_spacing,
        )


settings = Settings()

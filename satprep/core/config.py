"""
Application settings management.

Settings are loaded from environment variables with .env file support.
All configuration is validated using Pydantic.
"""

from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # ==========================================================================
    # Database
    # ==========================================================================

    database_path: Path = Field(
        default=Path("data/satprep.db"), description="Path to SQLite database file"
    )

    # ==========================================================================
    # Logging
    # ==========================================================================

    log_sessions_to_keep: int = Field(
        default=5, ge=1, le=100, description="Number of per-process log files to retain"
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")


# ============================================================================
# Gamification Configuration (from YAML)
# ============================================================================


class XPRules(BaseModel):
    """XP awarded per activity."""

    answered_question: int = Field(default=10, ge=0)
    correct_answer_bonus: int = Field(default=5, ge=0)
    finish_practice_set: int = Field(default=50, ge=0)
    finish_full_test: int = Field(default=100, ge=0)
    streak_bonus: int = Field(default=25, ge=0)
    streak_bonus_min_days: int = Field(
        default=3, ge=1, description="Streak length at which the bonus starts"
    )


class GamificationConfig(BaseModel):
    """
    Complete gamification configuration loaded from gamification.yaml.

    Badges map a minimum level to a badge name.
    """

    xp: XPRules = Field(default_factory=XPRules)
    xp_per_level: int = Field(default=500, ge=1)
    badges: Dict[int, str] = Field(
        default_factory=lambda: {
            1: "SAT Rookie",
            3: "SAT Explorer",
            5: "SAT Warrior",
            8: "SAT Master",
            12: "SAT Legend",
            15: "SAT Champion",
        }
    )

    @field_validator("badges")
    @classmethod
    def require_level_one_badge(cls, v: Dict[int, str]) -> Dict[int, str]:
        """Every level must resolve to a badge, so level 1 needs one."""
        if 1 not in v:
            raise ValueError("badges must define a badge for level 1")
        return dict(sorted(v.items()))


def load_gamification_config(
    config_path: Optional[Path] = None,
) -> GamificationConfig:
    """
    Load gamification configuration from YAML file.

    Args:
        config_path: Path to gamification.yaml. If None, uses default path.

    Returns:
        GamificationConfig with validated settings

    Raises:
        ValueError: If config validation fails
    """
    if config_path is None:
        # Default path: config/gamification.yaml relative to project root
        current = Path(__file__).resolve().parent.parent.parent
        check_path = current / "config" / "gamification.yaml"
        if check_path.exists():
            config_path = check_path
        else:
            cwd_config = Path.cwd() / "config" / "gamification.yaml"
            if cwd_config.exists():
                config_path = cwd_config
            else:
                return GamificationConfig()

    config_path = Path(config_path).resolve()

    if not config_path.exists():
        return GamificationConfig()

    with open(str(config_path)) as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        return GamificationConfig()

    return GamificationConfig(**config_data)


# Global settings instance
settings = Settings()

# Global gamification config instance
gamification_config = load_gamification_config()

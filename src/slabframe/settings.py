"""Environment-based configuration via pydantic-settings."""

from pydantic_settings import BaseSettings

from slabframe.config import EngineConfig


class Settings(BaseSettings):
    """Server settings and engine defaults, configurable via SLABFRAME_* env vars."""

    model_config = {"env_prefix": "SLABFRAME_"}

    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    floor_thickness: float = 0.15
    stud_spacing: float = 2.0
    stud_thickness: float = 0.15
    default_floor_type: str = "Generic 150mm"
    isolate_threshold_failures: bool = True

    def engine_config(self) -> EngineConfig:
        """Engine configuration seeded from the environment."""
        return EngineConfig(
            floor_thickness=self.floor_thickness,
            stud_spacing=self.stud_spacing,
            stud_thickness=self.stud_thickness,
            default_floor_type=self.default_floor_type,
            isolate_threshold_failures=self.isolate_threshold_failures,
        )

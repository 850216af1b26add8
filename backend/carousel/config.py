from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Assets
    font_path: str = "assets/fonts"  # One sub-directory per family, e.g. assets/fonts/Montserrat
    output_dir: str = "generated_images"

    # Slide derivation
    max_slides: int = 20
    bonus_slide_id: int = 999

    # Layout engine
    base_font_size: float = 64.0  # Unscaled paragraph size before per-slide overrides
    default_line_height: float = 1.35
    shrink_step_px: float = 2.0
    header_max_chars: int = 80

    # Asset decoding
    asset_timeout: float = 30.0  # Seconds, remote avatar / background fetch

    # Session
    render_debounce: float = 0.4  # Seconds between the last edit and the recompute

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()

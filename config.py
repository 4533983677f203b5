from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration, overridable with SU_* environment variables or a .env file"""
    model_config = SettingsConfigDict(env_prefix="SU_", env_file=".env", extra="ignore")

    app_name: str = "Security Unit Frame Decoder API"
    host: str = "0.0.0.0"
    port: int = 8000

    log_level: str = "INFO"
    log_file: str = "frame_decoder.log"

    max_frame_chars: int = 8192
    max_batch_size: int = 64
    batch_workers: int = 4


settings = Settings()

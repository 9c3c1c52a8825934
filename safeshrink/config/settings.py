from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    max_file_size_bytes: int = 50 * 1024 * 1024
    min_file_size_bytes: int = 100
    max_filename_length: int = 255
    image_probe_timeout_seconds: float = 5.0
    max_image_dimension: int = 10000

    scan_window_bytes: int = 1024 * 1024
    threat_rules_path: str = ""
    auto_accept_warnings: bool = False

    max_output_width: int = 1920
    max_output_height: int = 1080
    default_quality: int = 80

    pdf_engine: str = "pymupdf"

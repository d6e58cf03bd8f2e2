"""Configuration management for renderq."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # Rendering
    renders_dir: Path = Path("./renders")
    serve_url: str = "./build"
    composition_id: str = "RenderComposition"
    codec: str = "h264"
    remotion_command: str = "npx remotion"

    # Queue (0 = unbounded)
    max_queue_size: int = 0

    # Primary upload (Gofile)
    gofile_upload_url: str = "https://upload-ap-sgp.gofile.io/uploadfile"
    proxy_url: str | None = None
    upload_timeout: float = 600.0
    mirror_url_template: str = "https://gf.1drv.eu.org/{token}"

    # Secondary upload (Cloudflare R2)
    cloudflare_account_id: str = ""
    r2_access_key_id: str = ""
    r2_secret_access_key: str = ""
    r2_bucket: str = "key4u"
    r2_public_base_url: str = "https://pub-c76729f4096e4e008c08070f1ee35f4a.r2.dev"
    content_type: str = "video/mp4"

    @property
    def r2_endpoint_url(self) -> str:
        """S3-compatible endpoint for the configured Cloudflare account."""
        return f"https://{self.cloudflare_account_id}.r2.cloudflarestorage.com"

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.renders_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Beauty Villa"
    debug: bool = False

    # Paths
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "beautyvilla.db"

    # Auth (shared with the rest of the site)
    jwt_secret: str = "beauty-villa-secret-key"
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7

    # Chat
    send_queue_size: int = 100  # per-connection outbound buffer

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "BEAUTYVILLA_",
    }


settings = Settings()

"""Photomap Server Configuration."""

import secrets
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Server
    server_name: str = "Photomap Server"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    # Paths
    data_dir: Path = Path.home() / "photomap" / "data"

    # Database
    db_path: Path = Path.home() / "photomap" / "data" / "photomap.db"

    # JWT (tokens are issued by the auth service; we only verify them)
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440  # 24 hours

    # Map
    render_mode_threshold: int = 150  # points above this switch the client to WebGL clusters
    map_debounce_ms: int = 300
    map_cache_max_age: int = 30  # seconds, private cache only

    # Pagination
    viewport_page_size: int = 20
    viewport_max_page_size: int = 100
    timeline_page_size: int = 50
    timeline_max_page_size: int = 100

    model_config = {"env_prefix": "PHOTOMAP_"}

    def ensure_dirs(self) -> None:
        """Create all required directories."""
        for d in [self.data_dir, self.db_path.parent]:
            d.mkdir(parents=True, exist_ok=True)

    def ensure_secrets(self) -> None:
        """Generate the JWT secret if not set, persist to file so it survives restarts."""
        secrets_file = self.data_dir / ".secrets"
        saved = {}
        if secrets_file.exists():
            for line in secrets_file.read_text().strip().splitlines():
                if "=" in line:
                    k, v = line.split("=", 1)
                    saved[k.strip()] = v.strip()

        if not self.jwt_secret:
            self.jwt_secret = saved.get("jwt_secret", "") or secrets.token_urlsafe(32)

        secrets_file.write_text(f"jwt_secret={self.jwt_secret}\n")


settings = Settings()
settings.ensure_dirs()
settings.ensure_secrets()

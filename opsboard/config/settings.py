from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database - ops database shared with the reporters
    pg_host: str = "127.0.0.1"
    pg_port: int = 9432
    pg_database: str = "kodiack_ai"
    pg_user: str = "postgres"
    pg_password: str = ""
    # Small pool: the dashboard is a handful of internal users
    pg_pool_size: int = 5
    pg_max_overflow: int = 0
    pg_command_timeout: int = 30

    # Application
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # Remote host running the AI team workers
    ai_droplet_url: str = "http://localhost"
    # Dashboard on the droplet handles PM2 commands
    pm2_control_port: int = 5500
    # Usage/budget tracker
    usage_url: str = "http://localhost:5403"

    # Timeouts (seconds)
    worker_health_timeout: float = 3.0
    worker_control_timeout: float = 10.0
    usage_timeout: float = 5.0
    git_command_timeout: float = 5.0
    git_log_timeout: float = 10.0
    host_command_timeout: float = 5.0

    # Repo-state reconciliation
    pc_service_id: str = "user-pc"
    repo_event_window_days: int = 7
    state_hash_length: int = 12

    # Commit lookups only run git inside these roots
    allowed_repo_roots: list[str] = ["/var/www/", "/home/"]

    # Droplet identity shown on the operations panel
    droplet_name: str = "Studio-Dev"
    droplet_ip: str = "127.0.0.1"

    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL assembled from the PG_* parameters."""
        url = URL.create(
            "postgresql+asyncpg",
            username=self.pg_user,
            password=self.pg_password or None,
            host=self.pg_host,
            port=self.pg_port,
            database=self.pg_database,
        )
        return url.render_as_string(hide_password=False)

    @property
    def control_base_url(self) -> str:
        """Base URL of the process-control endpoint on the droplet."""
        return f"{self.ai_droplet_url}:{self.pm2_control_port}"


settings = Settings()

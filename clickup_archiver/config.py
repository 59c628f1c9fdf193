from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"

    clickup_api_key: str = ""
    clickup_list_id: str = ""
    clickup_api_base: str = "https://api.clickup.com/api/v2"

    archive_table_name: str = "clickup_archived_tasks"
    aws_region: str = "us-east-1"
    dynamodb_endpoint_url: str | None = None

    # Tuned against ClickUp's rate limit; adjust per workspace.
    archive_max_batch: int = 10
    archive_delay_seconds: float = 0.3
    delete_timeout_seconds: float = 8
    page_timeout_seconds: float = 8
    single_page_timeout_seconds: float = 30
    scan_budget_seconds: float = 25
    scan_parallelism: int = 3
    early_stop_multiplier: int = 2
    status_batch_size: int = 3
    status_batch_delay_seconds: float = 0.5
    status_timeout_seconds: float = 5
    http_retries: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

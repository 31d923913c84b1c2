from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Storage
    database_url: str = "sqlite:///./hrflow.sqlite3"

    # Notification service (optional; notifications are dropped when unset)
    notification_base_url: str | None = None
    notification_timeout_seconds: float = 5.0
    # Worker threads delivering notifications; 1 keeps them in emission order
    notification_workers: int = 1

    # Resource lookup used to validate target ids on submission
    target_resolver_url: str | None = None

    # Request rules
    description_min_length: int = 10
    reviewer_inboxes: dict[str, str] = {
        "leave": "hr",
        "logistics_item": "logistics",
    }

    # Listing
    default_page_size: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="HRFLOW_",
        extra="ignore",
    )

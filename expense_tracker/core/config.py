from functools import lru_cache
from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, API_BASE_URL, PAGE_SIZE, EXPENSE_STORE).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Expense Tracker"
    debug: bool = False
    version: str = "0.1.0"

    # Remote mock API
    api_base_url: AnyHttpUrl = "https://68355da3cd78db2058c11959.mockapi.io/api/v1"
    http_timeout_seconds: float = 5.0
    http_retries: int = Field(2, ge=0)
    http_backoff_seconds: float = Field(0.5, ge=0)

    # Expense list
    # Allowed: 'http' (remote mock API), 'memory' (process-local store, no network)
    expense_store: str = "http"
    page_size: int = Field(10, ge=1)

    # Budget notifications fire once spending reaches this share of the budget
    budget_warning_ratio: float = Field(0.8, gt=0, le=1)

    def init_post_load(self) -> None:
        """Validate cross-field choices that pydantic field rules can't express."""
        allowed = {"http", "memory"}
        if self.expense_store not in allowed:
            raise ValueError(
                f"Unsupported expense_store '{self.expense_store}'. Allowed: {allowed}"
            )

    @property
    def base_url(self) -> str:
        return str(self.api_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings

"""Configuration management using pydantic-settings.

Loads from environment variables and .env file.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BUSINESS_CONTEXT = (
    "Beans.ie is a multi-roaster platform showcasing specialty coffees from around the world. "
    "It offers limited-edition coffees from renowned international roasters, a curated marketplace "
    "of Ireland's best specialty coffees roasted to order, premium home brewing equipment tested "
    "by experts, and educational events. The mission is to make inaccessible coffee accessible, "
    "with a clear, concise, and informative tone that respects the craft of specialty coffee."
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes:
        shopify_shop_name: Store domain, e.g. "beans-ie.myshopify.com".
        shopify_access_token: Admin API access token for the store.
        shopify_api_version: Versioned Admin API path segment.
        openai_api_key: OpenAI API key used for alt text generation.
        openai_model: Vision-capable chat model with structured output support.
        page_size: Number of files requested per listing page.
        batch_size: Number of images processed concurrently per batch.
        max_attempts: Attempts per remote call before giving up.
        retry_delay: Base backoff delay in seconds.
        request_timeout: HTTP timeout for storefront requests in seconds.
        tpm_limit: Token-per-minute budget of the completion API.
        tokens_per_request: Estimated tokens consumed by one generation.
        tpm_threshold: Fraction of the budget that triggers a pause.
        tpm_pause_seconds: Pause length when the budget is nearly spent.
        required_scopes: Access scopes the store app must hold.
        business_context: Brand description embedded in every prompt.
        output_dir: Directory where run reports are written.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_json: Output logs in JSON format for production.
        log_file: Optional path for an additional rotating log file.

    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shopify
    shopify_shop_name: str = ""
    shopify_access_token: str = ""
    shopify_api_version: str = "2025-04"

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-2024-08-06"

    # Requests
    page_size: int = 50
    batch_size: int = 5
    max_attempts: int = 3
    retry_delay: float = 1.0
    request_timeout: int = 30

    # Token budget (estimated, not measured)
    tpm_limit: int = 30000
    tokens_per_request: int = 1000
    tpm_threshold: float = 0.9
    tpm_pause_seconds: float = 60.0

    # Run
    required_scopes: list[str] = ["read_files", "write_files"]
    business_context: str = DEFAULT_BUSINESS_CONTEXT
    output_dir: str = "./output"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: str | None = None

    @property
    def output_path(self) -> Path:
        """Return the report directory as a Path object.

        Returns:
            Path: Path to the report output directory.

        """
        return Path(self.output_dir)

    @property
    def graphql_endpoint(self) -> str:
        """Return the Admin GraphQL endpoint for the configured store."""
        return f"https://{self.shopify_shop_name}/admin/api/{self.shopify_api_version}/graphql.json"

    def missing_secrets(self) -> list[str]:
        """Return the names of required secrets that are not set."""
        secrets = {
            "SHOPIFY_SHOP_NAME": self.shopify_shop_name,
            "SHOPIFY_ACCESS_TOKEN": self.shopify_access_token,
            "OPENAI_API_KEY": self.openai_api_key,
        }
        return [name for name, value in secrets.items() if not value]

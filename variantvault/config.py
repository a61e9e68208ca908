from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "VariantVault"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/variantvault"

    # Header set by the upstream auth gateway once a user is signed in
    user_id_header: str = "X-User-Id"

    default_price_source: str = "cardmarket"

    # Caps the IN-clause size of a single bulk quantity lookup
    max_bulk_card_ids: int = 100

    max_variant_quantity: int = 9999


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_url_direct: str | None = None

    # JWT
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_days: int = 7
    bcrypt_rounds: int = 12

    # PayPal (Orders v2 REST API)
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_base_url: str = "https://api-m.sandbox.paypal.com"
    paypal_currency: str = "USD"
    paypal_timeout_seconds: float = 15.0

    # Product media uploads
    upload_dir: str = "uploads/products"
    upload_url_prefix: str = "/uploads/products"
    max_upload_bytes: int = 10 * 1024 * 1024

    # App
    cors_origins: list[str] = ["*"]
    app_name: str = "Storefront API"
    version: str = "1.0.0"
    debug: bool = False


settings = Settings()

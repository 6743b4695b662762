from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Required Fields ---
    PROJECT_NAME: str = "Hotel_Orders"
    DATABASE_URL: str
    PAYSTACK_SECRET_KEY: str

    # --- Optional / Default Fields ---
    PAYSTACK_BASE_URL: str = "https://api.paystack.co"
    FRONTEND_URL: str = "http://localhost:3000"
    PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    GATEWAY_TIMEOUT_SECONDS: float = 10.0
    ORDER_CODE_MAX_ATTEMPTS: int = 5

    DB_CONNECT_MAX_RETRIES: int = 10
    DB_CONNECT_WAIT_SECONDS: float = 3.0

    # Webhook delivery ledger (falls back to RAM when Redis is missing)
    REDIS_URL: str | None = None
    WEBHOOK_LEDGER_TTL_SECONDS: int = 86400

    # Front desk WhatsApp notifications (disabled when missing)
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_FROM_NUMBER: str | None = None
    FRONT_DESK_PHONE_NUMBER: str | None = None

    # --- Configuration ---
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Unknown variables in .env are ignored instead of crashing
    )

settings = Settings()

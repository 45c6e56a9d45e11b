"""Application configuration via environment variables."""

from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str

    # Admin session
    admin_jwt_secret: str
    admin_session_name: str = "admin_session"
    admin_session_max_age: int = 604800  # 7 days
    cookie_secure: bool = True
    bcrypt_rounds: int = 10

    # Stripe
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # Resend (email)
    resend_api_key: str = ""
    from_email: str = "bookings@journeyforward.ca"
    admin_email: str = "admin@journeyforward.ca"

    # Links used in customer/admin emails
    public_base_url: str = "http://localhost:3000"
    admin_dashboard_url: str = "http://localhost:3000/admin"

    # Booking rules
    cancellation_fee: Decimal = Decimal("25.00")  # CAD
    cancellation_hours_limit: int = 24
    minimum_booking_lead_hours: int = 24
    default_currency: str = "CAD"
    default_tax_rate: Decimal = Decimal("0.12")
    business_timezone: str = "America/Vancouver"

    # S3 (item photos)
    s3_bucket_name: str = ""
    aws_region: str = ""
    s3_base_url: str = ""

    # App
    log_level: str = "INFO"
    environment: str = "development"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()  # type: ignore[call-arg]

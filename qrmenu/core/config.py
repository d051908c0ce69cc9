"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "QR Menu"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./qrmenu.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "720"))
    session_secret: str = getenv("SESSION_SECRET", "dev-session-secret-change-me")
    admin_user: str = getenv("ADMIN_USER", "")
    admin_pass: str = getenv("ADMIN_PASS", "")
    default_restaurant_name: str = getenv("DEFAULT_RESTAURANT_NAME", "Le Petit Bistro")
    seed_demo_menu: bool = getenv("SEED_DEMO_MENU", "0") == "1"
    change_feed_ping_seconds: float = float(getenv("CHANGE_FEED_PING_SECONDS", "25"))


settings: Settings = Settings()

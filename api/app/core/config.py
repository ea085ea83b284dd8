from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "POS API"
    environment: str = "development"

    database_url: str
    sql_echo: bool = False
    auto_create_tables: bool = True

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 1440
    bcrypt_rounds: int = 12

    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"

    low_stock_threshold: int = 10
    dashboard_list_size: int = 5

    admin_email: str = "admin@pos.com"
    admin_password: str = "Admin@123"
    admin_name: str = "Admin User"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()

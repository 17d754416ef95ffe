from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"
    ENV: str = "dev"  # "dev" or "prod"

    # --- ADMISSIONS ---
    # Placeholder credential for accounts created on admission approval.
    # Leave unset to generate a random one per account.
    STUDENT_DEFAULT_PASSWORD: str | None = None

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    PUBLIC_FORM_RATE_LIMIT: str = "10/minute"
    LOGIN_RATE_LIMIT: str = "20/minute"

    # --- EMAIL SETTINGS ---
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 2525  # Default to Mailtrap port
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    EMAILS_FROM_EMAIL: str = "no-reply@campus-erp.local"
    EMAILS_FROM_NAME: str = "Campus ERP"
    FRONTEND_URL: str = "http://localhost:3000" # For login link

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Primary server hosts VIEW_FRAGMENT_LIST (department directory)
    PRIMARY_SERVER: str = "MSI"
    DATABASE_NAME: str = "QLDSV_TC"
    PRIMARY_DB_USER: str = "sa"
    PRIMARY_DB_PASSWORD: str = "123456"

    # Per-department logins (teacher / department staff and students)
    DEPARTMENT_DB_USER: str = "HTKN"
    DEPARTMENT_DB_PASSWORD: str = "123456"
    STUDENT_DB_USER: str = "SV"
    STUDENT_DB_PASSWORD: str = "123456"

    # Server holding the shared SUBJECT / LECTURER catalogues
    SHARED_SERVER: str = "MSI"

    ODBC_DRIVER: str = "ODBC Driver 18 for SQL Server"
    DB_ENCRYPT: bool = False
    DB_TRUST_SERVER_CERTIFICATE: bool = True
    DB_POOL_SIZE: int = 10
    DB_CONNECT_TIMEOUT: int = 15

    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # Password accepted by the legacy SP_LOGIN flow
    LEGACY_ACCOUNT_PASSWORD: str = "123456"

    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "20/minute"

    WKHTMLTOPDF_PATH: str | None = None

    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    ENV: str = "dev"  # "dev" or "prod"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "WM-TABLES"
    LOG_LEVEL: str = "INFO"
    TABLE_DEFAULT_PAGE_SIZE: int = 25
    TABLE_PAGE_SIZE_OPTIONS: list[int] = [10, 25, 50, 100]
    TABLE_MAX_ROWS: int = 10000
    EXPORTS_STORAGE_PATH: str = "./exports_storage"
    EXPORTS_MAX_ROWS: int = 50000

settings = Settings()

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Remote shop API
    API_BASE_URL: str
    API_TIMEOUT_SECONDS: float = 30.0

    # Session (holds the bearer token)
    SESSION_SECRET_KEY: str

    # Shop Configuration
    SHOP_NAME: str = "My Shop"
    CURRENCY_LABEL: str = "บาท"

    # Used when neither the session nor the cart carries a customer id
    DEFAULT_CUSTOMER_ID: int = 1

    LOG_LEVEL: str = "INFO"

    # uvicorn
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

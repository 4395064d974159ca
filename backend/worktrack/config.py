from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    secret_key: str = "dev-secret-key-change-in-production"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "text"

    # Security
    allowed_origins: str = "http://localhost:3000,http://localhost:5000,http://localhost"
    access_token_expire_minutes: int = 30

    # Authorization
    access_matrix_path: str = ""  # optional JSON snapshot replacing the built-in matrix

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _validate_production(self):
        if self.environment == "production":
            if self.secret_key == "dev-secret-key-change-in-production":
                raise ValueError(
                    "Production requires a non-default SECRET_KEY"
                )
        if self.log_format not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        return self


settings = Settings()

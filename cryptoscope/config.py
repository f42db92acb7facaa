from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="auto", description='Log output: "json", "console" or "auto"')

    # HTTP
    request_timeout_seconds: float = Field(default=10.0, description="Per-request timeout for provider calls")

    # Provider base URLs (all key-free)
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko public API base URL",
    )
    defillama_base_url: str = Field(
        default="https://api.llama.fi",
        description="DefiLlama core API base URL (protocols, chains, DEX volumes)",
    )
    defillama_yields_base_url: str = Field(
        default="https://yields.llama.fi",
        description="DefiLlama yields API base URL (pools)",
    )
    defillama_stablecoins_base_url: str = Field(
        default="https://stablecoins.llama.fi",
        description="DefiLlama stablecoins API base URL",
    )
    fear_greed_base_url: str = Field(
        default="https://api.alternative.me",
        description="alternative.me Fear & Greed index base URL",
    )


# Global settings instance
settings = Settings()

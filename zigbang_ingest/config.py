from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Runtime ---
    ENV: str = "dev"  # dev|prod
    DEBUG: bool = False

    # --- Central ingestion service ---
    LANDOMO_API_URL: str = "https://core.landomo.com/api/v1"
    LANDOMO_API_KEY: str | None = None

    # --- Scraper identity ---
    PORTAL: str = "zigbang"
    COUNTRY: str = "south-korea"

    # --- Zigbang ---
    ZIGBANG_API_URL: str = "https://apis.zigbang.com"
    ZIGBANG_WEB_URL: str = "https://www.zigbang.com"
    USER_AGENT: str = "Mozilla/5.0 (compatible; LandomoBot/1.0)"
    PROXY_URL: str | None = None

    # --- Pacing ---
    REQUEST_DELAY_MS: int = 300
    HTTP_TIMEOUT_S: float = 30.0
    BATCH_SIZE: int = 100
    MAX_RESULTS: int = 1000  # 0 disables the cap

    # --- Search defaults ---
    DEFAULT_CITY: str = "Seoul"
    TARGET_CITIES: str = ""  # comma separated; empty => DEFAULT_CITY
    TARGET_CATEGORIES: str = "oneroom,villa,officetel"

    # Filter bounds, in manwon
    DEPOSIT_MIN: int = 0
    DEPOSIT_MAX: int | None = None
    RENT_MIN: int = 0
    RENT_MAX: int | None = None

    @property
    def is_production(self) -> bool:
        return self.ENV.strip().lower() in ("prod", "production")

    @property
    def request_delay_s(self) -> float:
        return max(0, self.REQUEST_DELAY_MS) / 1000.0

    def cities(self) -> list[str]:
        out = [c.strip() for c in self.TARGET_CITIES.split(",") if c.strip()]
        return out or [self.DEFAULT_CITY]

    def categories(self) -> list[str]:
        return [c.strip().lower() for c in self.TARGET_CATEGORIES.split(",") if c.strip()]

    def deposit_range(self) -> tuple[int, int | None]:
        return (self.DEPOSIT_MIN, self.DEPOSIT_MAX)

    def rent_range(self) -> tuple[int, int | None]:
        return (self.RENT_MIN, self.RENT_MAX)


def require_api_key(cfg: Settings) -> None:
    """
    The ingestion token is only mandatory in production; dev runs may post
    unauthenticated to a local core service.
    """
    if cfg.is_production and not cfg.LANDOMO_API_KEY:
        raise ConfigError("LANDOMO_API_KEY is required in production")

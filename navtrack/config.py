from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    LOG_LEVEL: str = "INFO"
    PORTS_CONFIG: str = "config/ports.yaml"
    # Temporal gap that forces an interval to close (seconds)
    MAX_GAP_SECONDS: float = 0.6
    # Port proximity ceilings (km)
    PORT_TAG_MAX_KM: float = 5.0
    DOCKED_MAX_KM: float = 4.0
    MANEUVERING_MAX_KM: float = 10.0
    UNDEFINED_BEYOND_KM: float = 40.0
    JOURNEY_DEPARTURE_MAX_KM: float = 3.0
    # CSV layout (comma-separated alias lists, first match wins)
    DEFAULT_DELIMITER: str = ","
    TIME_COLUMN: str = "time"
    LAT_COLUMNS: str = "00-lathr [deg],latitude,lat"
    LON_COLUMNS: str = "01-lonhr [deg],longitude,lon"
    SPEED_COLUMNS: str = "04-speed [knots],speed,sog"
    # Upload limits
    MAX_UPLOAD_SIZE_MB: int = 100
    # CORS origins (comma-separated string for env var support)
    CORS_ORIGINS: str = "http://localhost:3000"
    # Parallel reads when loading files from disk
    FILE_READ_WORKERS: int = 4


settings = Settings()


def split_aliases(value: str) -> list[str]:
    """Turn a comma-separated alias setting into a clean list."""
    return [v.strip() for v in value.split(",") if v.strip()]

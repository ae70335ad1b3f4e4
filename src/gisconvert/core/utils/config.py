from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    SERVER_NAME: str = Field("gis-format-conversion-server", alias="GIS_SERVER_NAME")
    SERVER_VERSION: str = Field("0.1.0", alias="GIS_SERVER_VERSION")
    LOG_LEVEL: str = Field("INFO", alias="GIS_LOG_LEVEL")

    # Reverse geocoding (Nominatim)
    NOMINATIM_URL: str = Field("https://nominatim.openstreetmap.org/reverse", alias="GIS_NOMINATIM_URL")
    GEOCODER_USER_AGENT: str = Field("GisFormatMcpServer/1.0", alias="GIS_GEOCODER_USER_AGENT")
    GEOCODER_TIMEOUT: Optional[float] = Field(30.0, alias="GIS_GEOCODER_TIMEOUT")  # seconds, whole request


def get_settings() -> Settings:
    return Settings()

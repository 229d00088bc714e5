from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

RdfFormatName = Literal["turtle", "ntriples", "nquads", "trig", "jsonld"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GRAPHSYNC_", env_file=".env", extra="ignore")

    app_name: str = "graphsync"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # RDF output format when neither --rdf-format nor the output extension decide
    default_rdf_format: RdfFormatName = "turtle"

    # JSON-LD output: 2 pretty-prints, 0 writes compact JSON
    json_indent: int = Field(default=2, ge=0)


settings = Settings()

import os
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

ENV_PREFIX = "QLSBRIDGE_"

# environment variable suffix -> Settings field
ENV_FIELDS: Dict[str, str] = {
    "HOST": "host",
    "PORT": "port",
    "GZIP": "use_gzip",
    "GZIP_MIN_SIZE": "gzip_minimum_size",
    "TIMEOUT": "request_timeout",
    "UPSTREAM_URL": "upstream_base_url",
    "LOG_FILE": "log_file",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Process-wide configuration, handed explicitly to the app factory."""

    host: str = "0.0.0.0"
    port: int = Field(40081, ge=1, le=65535)
    use_gzip: bool = False
    gzip_minimum_size: int = Field(1000, ge=0)
    request_timeout: float = Field(7.0, gt=0)
    upstream_base_url: str = "http://api.qlstats.net/api"
    log_file: Optional[str] = "qlsbridge.log"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``QLSBRIDGE_*`` environment variables.

        Unset variables keep their defaults. An empty ``QLSBRIDGE_LOG_FILE``
        disables the log file.
        """
        environ = os.environ if environ is None else environ
        values = {}
        for suffix, field in ENV_FIELDS.items():
            raw = environ.get(ENV_PREFIX + suffix)
            if raw is None:
                continue
            if field == "log_file" and not raw.strip():
                values[field] = None
            else:
                values[field] = raw
        return cls(**values)

import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

def _log_level_from_env() -> str:
    level = os.getenv("LOG_LEVEL", "WARNING").strip().upper()
    if level not in LOG_LEVELS:
        logging.getLogger(__name__).warning(f"Unknown LOG_LEVEL {level!r}, using WARNING")
        return "WARNING"
    return level

@dataclass
class Settings:
    # Persistence
    data_file: str = os.getenv("LIBRARY_DATA_FILE", "library_data.json")

    # Logging
    log_level: str = field(default_factory=_log_level_from_env)

    # CLI output: plain | json | rich
    output_mode: str = os.getenv("LIB_CLI_OUTPUT", "plain").lower()
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")

    # Application
    app_name: str = os.getenv("APP_NAME", "Library Management System")
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()

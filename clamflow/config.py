from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./clamflow.db"
    echo_sql: bool = False

    # Logging
    log_level: str = "INFO"

    # Number formats (see clamflow.utils.numbering for tokens)
    lot_number_format: str = "L-{date}-{seq:3}"
    shell_on_box_format: str = "SO-{date}-{seq:3}"
    meat_box_format: str = "CM-{date}-{seq:3}"

    model_config = {
        "env_prefix": "CLAMFLOW_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()

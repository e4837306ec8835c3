import json
import os
import pathlib
from dataclasses import dataclass, field

from core.columns import DEFAULT_COLUMNS


@dataclass
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    name: str = "crm"
    user: str = "crm"
    password: str = ""

    @property
    def conninfo(self) -> str:
        return (
            f"host={self.host} port={self.port} "
            f"dbname={self.name} user={self.user} password={self.password}"
        )


@dataclass
class TableSettings:
    page_size: int = 10
    default_columns: str = DEFAULT_COLUMNS
    save_policy: str = "refetch"  # "refetch" or "force_reload"
    discard_stale_loads: bool = False
    log_level: str = "INFO"


@dataclass
class AppConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    table: TableSettings = field(default_factory=TableSettings)

    @classmethod
    def load(cls) -> "AppConfig":
        config_path = os.environ.get("CONFIG_FILE", "/run/secrets/config.json")
        path = pathlib.Path(config_path)

        if path.exists():
            with open(path) as f:
                data = json.load(f)
            db_data = data.get("database", {})
            table_data = data.get("table", {})
            return cls(
                database=DatabaseConfig(**db_data),
                table=TableSettings(**table_data),
            )

        print(f"Warning: Config file not found at {config_path}")
        return cls()

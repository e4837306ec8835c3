from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from litestar import Litestar
from litestar.di import Provide

from core.config import AppConfig, TableSettings
from core.db import init_pool, close_pool, provide_source
from core.log import set_level
from api.health import HealthController, PingController
from api.opportunities import OpportunitiesController


config: AppConfig | None = None


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:
    global config
    config = AppConfig.load()
    set_level(config.table.log_level)
    print(f"Config loaded: database={config.database.host}")

    if config.database.host:
        await init_pool(config.database.conninfo)
        print("Database pool initialized")

    yield

    await close_pool()
    print("Database pool closed")


async def provide_table_settings() -> TableSettings:
    return config.table if config else TableSettings()


app = Litestar(
    route_handlers=[
        HealthController,
        PingController,
        OpportunitiesController,
    ],
    dependencies={
        "source": Provide(provide_source),
        "table_settings": Provide(provide_table_settings),
    },
    lifespan=[lifespan],
)

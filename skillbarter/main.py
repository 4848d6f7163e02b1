import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

load_dotenv()

from skillbarter.constants import APP_VERSION  # noqa: E402
from skillbarter.database import init_db  # noqa: E402
from skillbarter.error_handlers import register_error_handlers  # noqa: E402
from skillbarter.middleware import register_middleware  # noqa: E402
from skillbarter.rate_limit import limiter  # noqa: E402
from skillbarter.routers import barters, catalog, misc, profile, requests  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Skill Barter %s started", APP_VERSION)
    yield


app = FastAPI(
    title="Skill Barter",
    description="Trade a skill you can teach for one you want to learn",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Attach rate limiter to app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

register_middleware(app)
register_error_handlers(app)

app.include_router(misc.router)
app.include_router(catalog.router)
app.include_router(barters.router)
app.include_router(requests.router)
app.include_router(profile.router)

# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from storefront.api import register_routers
from storefront.data.database import init_db
from storefront.data.seed import seed
from storefront.utils.logging import RequestContextMiddleware, configure_logging, get_logger
from storefront.utils.settings import FRONTEND_URL, FRONTEND_URL_2

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    seed()
    yield


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    #front (SPA) wysyla cookie sesji - credentials + konkretne originy
    origins = [url for url in (FRONTEND_URL, FRONTEND_URL_2) if url]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Set-Cookie"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_routers(app)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)

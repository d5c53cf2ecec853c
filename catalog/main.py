# catalog/main.py
import logging
import time
from contextlib import asynccontextmanager
from typing import Callable

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .config import API_PREFIX, CORS_ORIGINS, HOST, LOG_LEVEL, PORT, SEED_DEMO_DATA
from .errors import install_exception_handlers
from .routes import categories, products, utility
from .seed import load_sample_catalog

logger = logging.getLogger("catalog-api")
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if SEED_DEMO_DATA:
        load_sample_catalog()
    yield


app = FastAPI(
    title="Product Catalog API",
    version="1.0.0",
    description="Products and categories with paginated, sortable queries",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)


# Access log with latency
@app.middleware("http")
async def access_logger(request: Request, call_next: Callable):
    start = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        dur_ms = (time.perf_counter() - start) * 1000.0
        logger.info("%s %s -> %s in %.1f ms", request.method, request.url.path, status, dur_ms)


app.include_router(products, prefix=API_PREFIX)
app.include_router(categories, prefix=API_PREFIX)
app.include_router(utility, prefix=API_PREFIX)


def run() -> None:
    uvicorn.run("catalog.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()

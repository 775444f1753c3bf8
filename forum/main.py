from contextlib import asynccontextmanager

from fastapi import FastAPI

from forum.core import db
from forum.store import router as store_router
from forum.store.service import DataStore


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool and schema once per process.
    await db.init_pool()
    try:
        await DataStore(db.database()).initialize_schema()
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.include_router(store_router.router, tags=["store"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

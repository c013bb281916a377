from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from persondir.config import APP_HOST, APP_PORT
from persondir.presentation.http.attributes_router import router as attributes_router
from persondir.presentation.usecases.lookup_person_attributes import verify_person_query_usecase

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await verify_person_query_usecase()
    yield


app = FastAPI(title="persondir", lifespan=lifespan)

app.include_router(attributes_router)


if __name__ == "__main__":
    # reload needs the "main:app" import string to watch files
    uvicorn.run(
        "main:app",
        host=APP_HOST,
        port=APP_PORT,
        reload=True,
    )

# healthcheck/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthcheck.config import get_settings
from healthcheck.db import init_db
from healthcheck.api.routes import router as api_router


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="HealthCheck AI API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for dev; tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.on_event("startup")
def on_startup() -> None:
    init_db()


@app.get("/")
def root():
    return {"message": "HealthCheck AI API is running"}


app.include_router(api_router, prefix="/api")

# app/main.py
import logging
from fastapi import FastAPI
from src.app.core.config import settings
from src.db.session import engine
from src.db import Base
from src.app.routers import api, reports

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)

app.include_router(api.router)
app.include_router(reports.router)


@app.on_event("startup")
async def on_startup():
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready at %s", engine.url.render_as_string(hide_password=True))


@app.get("/health")
def health():
    return {"status": "ok"}

# thinkarena/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
from .db import Base, engine, SessionLocal
from . import models
from .errors import install_error_handlers
from .seed_data import seed_reference_data
from .settings import get_settings
from .routes import questionnaire, dialogue, scores, badges, users, admin

settings = get_settings()


def _ensure_db_ready() -> None:
    Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    _ensure_db_ready()

    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()

    yield


app = FastAPI(title="ThinkArena API", version=settings.APP_VERSION, lifespan=lifespan)
install_error_handlers(app)

app.include_router(questionnaire.router)
app.include_router(dialogue.router)
app.include_router(scores.router)
app.include_router(badges.router)
app.include_router(users.router)
app.include_router(admin.router)


@app.get("/")
def health():
    return {"status": "ok", "service": "thinkarena", "version": settings.APP_VERSION}

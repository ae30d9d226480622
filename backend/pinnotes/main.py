import logging
import os

from fastapi import FastAPI

from pinnotes.api import auth, notes, pages

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

app = FastAPI(title="PinNotes")

app.include_router(auth.router)
app.include_router(notes.router)
app.include_router(pages.router)


@app.get("/health")
def health():
    return {"ok": True}

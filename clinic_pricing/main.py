"""
FastAPI 앱 진입점.
실행: python -m clinic_pricing.main  (또는 uvicorn clinic_pricing.main:app)
"""
import logging

import uvicorn
from fastapi import FastAPI

from clinic_pricing.api.routes import router
from clinic_pricing.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = FastAPI(title="Clinic Pricing", version="0.1.0")
app.include_router(router, prefix="/api")


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("clinic_pricing.main:app", host="127.0.0.1", port=8000)

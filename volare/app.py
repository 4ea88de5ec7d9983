import logging

from fastapi import FastAPI

from volare.budget.router import router as budget_router
from volare.corrections.router import router as corrections_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Volare")
app.include_router(budget_router)
app.include_router(corrections_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}

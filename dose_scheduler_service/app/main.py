from fastapi import FastAPI
from app.core.logging_config import configure_logging
from app.api.routes_schedule import router as schedule_router
from app.api.routes_doses import router as doses_router

configure_logging()

app = FastAPI(title="Dose Scheduler", version="1.0")

app.include_router(schedule_router)
app.include_router(doses_router)

@app.get("/health")
def health():
    return {"ok": True}

@app.get("/")
def root():
    return {"ok": True, "service": "Dose Scheduler"}

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers.admin import router as admin_router

# Routers
from routers.comparison import router as comparison_router
from routers.expressions import router as expressions_router
from routers.health import router as health_router
from routers.rankings import router as rankings_router
from routers.wrong_questions import router as wrong_questions_router

logger = logging.getLogger("math-explorer")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Math Explorer – Comparison API")

# Allow calls from the game front-end during development and in production
_DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173"
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", _DEFAULT_ORIGINS).split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(expressions_router)  # /expressions, /compare, /evaluate, /points
app.include_router(comparison_router)  # /comparison/sessions/...
app.include_router(rankings_router)  # /rankings/...
app.include_router(wrong_questions_router)  # /wrong-questions/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...

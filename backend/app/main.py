import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.database import init_db
from app.routes import bracket, draft, reference, simulations
from app.services.third_place_matrix import get_matrix

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Mundial 2026 Bracket API"

app = FastAPI(title=APP_NAME)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reference.router, prefix="/api", tags=["reference"])
app.include_router(bracket.router, prefix="/api", tags=["bracket"])
app.include_router(draft.router, prefix="/api", tags=["draft"])
app.include_router(simulations.router, prefix="/api", tags=["simulations"])


@app.on_event("startup")
def on_startup():
    init_db()
    # Build (or load) the third-place table now so a bad table fails at boot
    matrix = get_matrix()
    logger.info("Third-place matrix ready (%d options)", len(matrix))


@app.get("/api/health")
def health_check():
    return {"app_name": APP_NAME, "status": "healthy"}

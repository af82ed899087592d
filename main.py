from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import models  # noqa: F401  註冊所有 table
from database import Base, engine, SessionLocal, get_settings
from core.escrow_service import EscrowService
from api import games, roles

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 建立資料庫表，第一次啟動時設定 owner
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    Base.metadata.create_all(bind=engine)

    service = EscrowService(SessionLocal)
    service.ensure_initialized(settings.owner_address)
    app.state.escrow = service
    logger.info(f"Escrow service ready, owner={service.owner()}")
    yield
    # Shutdown: 釋放連線池
    engine.dispose()


app = FastAPI(
    title="Wager Escrow API",
    description="Two-party wagering escrow with admin arbitration",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(roles.router)
app.include_router(games.router)


@app.get("/")
def root():
    return {"message": "Wager Escrow API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

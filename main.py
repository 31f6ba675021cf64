import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from config import get_settings, DEFAULT_CONSTANTS
from core.round_controller import RoundController
from api import rounds

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 在目前的 event loop 上建立並啟動回合引擎
    controller = RoundController(asyncio.get_running_loop(), DEFAULT_CONSTANTS)
    app.state.controller = controller
    controller.start()
    yield
    # Shutdown: 取消所有計時器
    controller.stop()
    app.state.controller = None


app = FastAPI(
    title=settings.app_name,
    description="Self-looping simulated price path with random rug pulls",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(rounds.router)


@app.get("/")
def root():
    return {"message": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)

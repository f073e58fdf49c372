import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from swap_pricer.config import settings
from swap_pricer.utils.logger import get_logger, EventType

app = FastAPI(title="SwapPricer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize the service logger
logger = get_logger("swap_pricer", level=settings.LOG_LEVEL, entity=os.environ.get('MY_ENTITY'))

# Import routers
from swap_pricer.api.endpoints import swaps

# Include routers
app.include_router(swaps.router, prefix="/api", tags=["swaps"])

@app.get("/api/health")
async def health():
    return {"status": "ok"}

logger.info(
    "SwapPricer application initialised",
    event_type=EventType.SYSTEM_EVENT,
    data={"debug": settings.DEBUG, "default_ai_provider": settings.DEFAULT_AI_PROVIDER},
    tags=["app", "startup"]
)

from fastapi import APIRouter

from incident_bot.api.commands import router as commands_router
from incident_bot.api.events import router as events_router

router = APIRouter(prefix="/slack", tags=["slack"])
router.include_router(commands_router)
router.include_router(events_router)

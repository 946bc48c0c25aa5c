from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from app.database import database_connector
from app.jobs.check_reminders import run_check_reminders
from app.services.push_client import get_push_client

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("/check-reminders", response_class=PlainTextResponse)
async def check_reminders(connect=Depends(database_connector), push_client=Depends(get_push_client)):
    """Trigger for external schedulers; answers with the job's status and summary"""
    status_code, body = await run_check_reminders(connect=connect, push_client=push_client)
    return PlainTextResponse(body, status_code=status_code)

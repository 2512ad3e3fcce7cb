# app/routers/live_feed.py
from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/live-feed", summary="Live alert feed connection state and recent alerts")
def live_feed_status(request: Request):
    client = getattr(request.app.state, "live_feed", None)
    if client is None:
        return {"state": "DISABLED", "recentAlerts": []}
    return client.snapshot()

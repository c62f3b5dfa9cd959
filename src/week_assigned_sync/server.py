"""
FastAPI webhook service for Week Assigned syncing.

Endpoints:
    POST /webhooks/monday          monday.com webhook (challenge + column changes)
    POST /jobs/week-assigned/run   run a sweep over all configured boards
    GET  /health                   liveness
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .config import Config, load_config
from .notifier import SlackNotifier
from .reconcile import WeekAssignedUpdater

SERVICE_NAME = "week-assigned-sync"

# Events that can change an item's Week Assigned label
COLUMN_CHANGE_EVENTS = {"update_column_value", "change_status_column_value"}


def create_app(cfg: Optional[Config] = None, updater: Optional[WeekAssignedUpdater] = None) -> FastAPI:
    cfg = cfg or load_config()
    if updater is None:
        updater = WeekAssignedUpdater(cfg, notifier=SlackNotifier.from_config(cfg))

    app = FastAPI(title="Week Assigned Sync")
    app.state.cfg = cfg
    app.state.updater = updater

    @app.get("/")
    async def index():
        return {
            "status": "running",
            "service": SERVICE_NAME,
            "endpoints": ["/webhooks/monday", "/jobs/week-assigned/run", "/health"],
        }

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "boards": len(cfg.board_ids),
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        }

    @app.post("/webhooks/monday")
    async def monday_webhook(request: Request):
        try:
            body = await request.json()
        except ValueError:
            print("[ERROR] monday.com webhook with unreadable body", flush=True)
            return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

        if not isinstance(body, dict):
            return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

        challenge = body.get("challenge")
        if challenge:
            print("[WEBHOOK] monday.com webhook challenge received", flush=True)
            return {"challenge": challenge}

        event = body.get("event") or {}
        if not isinstance(event, dict):
            print(f"[ERROR] monday.com webhook with malformed event: {event!r}", flush=True)
            return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})

        event_type = event.get("type")
        print(
            f"[WEBHOOK] monday.com webhook received: type={event_type} board={event.get('boardId')} "
            f"item={event.get('pulseId')} column={event.get('columnId')}",
            flush=True,
        )

        if event_type in COLUMN_CHANGE_EVENTS:
            # Failures are reported in the body only, so monday.com does not retry
            result = await run_in_threadpool(updater.handle_column_change, event)
            return {
                "success": True,
                "message": "Webhook processed successfully",
                "result": result.to_dict(),
            }

        if event_type in {"create_item", "create_update"}:
            print(f"[WEBHOOK] {event_type} for item {event.get('pulseId')} - nothing to sync", flush=True)
        else:
            print(f"[WEBHOOK] Unhandled monday.com event type: {event_type}", flush=True)

        return {"success": True, "message": "Webhook processed successfully"}

    @app.post("/jobs/week-assigned/run")
    def run_sweep(dry_run: bool = False):
        result = updater.run_manually(dry_run=dry_run)
        return result.to_dict()

    return app


def main() -> None:
    import uvicorn

    cfg = load_config()
    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()

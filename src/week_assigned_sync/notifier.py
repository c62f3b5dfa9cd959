from __future__ import annotations

from typing import Optional

from slack_sdk.errors import SlackClientError
from slack_sdk.webhook import WebhookClient


class SlackNotifier:
    """Posts plain-text sweep summaries to a Slack incoming webhook."""

    def __init__(self, webhook_url: Optional[str], enabled: bool = True) -> None:
        self.enabled = bool(enabled and webhook_url)
        self.webhook: Optional[WebhookClient] = WebhookClient(webhook_url) if self.enabled else None

    @classmethod
    def from_config(cls, cfg) -> "SlackNotifier":
        return cls(cfg.slack_webhook_url, enabled=cfg.slack_notifications_enabled)

    def send(self, text: str) -> bool:
        if not self.enabled or self.webhook is None:
            print(f"[INFO] Slack notification (disabled): {text}", flush=True)
            return False

        try:
            resp = self.webhook.send(text=text)
        except (SlackClientError, OSError) as e:
            print(f"[WARNING] Failed to send Slack notification: {e}", flush=True)
            return False

        if resp.status_code != 200:
            print(f"[WARNING] Failed to send Slack notification: {resp.status_code} {resp.body}", flush=True)
            return False
        return True

    def send_sweep_summary(self, result) -> bool:
        lines = [
            f"Week Assigned sweep: {result.successful} board(s) succeeded, {result.failed} failed "
            f"in {result.duration_seconds:.1f}s"
        ]
        for board in result.boards:
            name = board.board_name or board.board_id
            if board.success:
                lines.append(
                    f"- {name}: updated {board.updated_items}, skipped {board.skipped_items}, "
                    f"errors {board.failed_items}"
                )
            else:
                lines.append(f"- {name}: FAILED ({board.reason or board.error})")
        for err in result.errors:
            lines.append(f"- board {err['board_id']}: {err['error']}")
        return self.send("\n".join(lines))

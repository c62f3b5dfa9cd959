from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List, Optional

from dotenv import load_dotenv


DEFAULT_API_URL = "https://api.monday.com/v2"


@dataclass
class Config:
    monday_api_token: str
    board_ids: List[str] = field(default_factory=list)
    monday_api_url: str = DEFAULT_API_URL
    monday_api_version: str = "2024-01"
    # Column titles used to bind columns to their roles (exact, case-sensitive)
    deadline_column_title: str = "Internal Deadline"
    target_column_title: str = "Week Assigned"
    status_column_title: str = "Status"
    done_label: str = "Done"  # Workflow status excluded from sweeps
    page_size: int = 500  # Items per items_page request
    max_pages: int = 20  # Stop paginating after this many pages
    request_timeout: int = 30  # Seconds per monday.com request
    # Slack run summaries (incoming webhook)
    slack_webhook_url: Optional[str] = None
    slack_notifications_enabled: bool = False
    output_json_path: Optional[str] = None  # Write sweep results here when set
    host: str = "0.0.0.0"
    port: int = 3001


def parse_board_ids(raw: Optional[str]) -> List[str]:
    """Split a comma separated board id list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def load_config() -> Config:
    """Load configuration from environment variables / .env file."""

    load_dotenv()

    monday_api_token = os.getenv("MONDAY_API_TOKEN", "").strip()
    if not monday_api_token:
        raise RuntimeError(
            "MONDAY_API_TOKEN must be set in environment or .env file. "
            "Generate a personal API token under monday.com > Developers > My access tokens."
        )

    def _int_env(name: str, default: int) -> int:
        val = os.getenv(name)
        if not val:
            return default
        try:
            return int(val)
        except ValueError:
            return default

    def _bool_env(name: str, default: bool = False) -> bool:
        val = os.getenv(name)
        if val is None:
            return default
        return val.lower() in {"1", "true", "yes", "y"}

    return Config(
        monday_api_token=monday_api_token,
        board_ids=parse_board_ids(os.getenv("MONDAY_BOARD_IDS")),
        monday_api_url=os.getenv("MONDAY_API_URL", DEFAULT_API_URL),
        monday_api_version=os.getenv("MONDAY_API_VERSION", "2024-01"),
        deadline_column_title=os.getenv("DEADLINE_COLUMN_TITLE", "Internal Deadline"),
        target_column_title=os.getenv("WEEK_ASSIGNED_COLUMN_TITLE", "Week Assigned"),
        status_column_title=os.getenv("STATUS_COLUMN_TITLE", "Status"),
        done_label=os.getenv("DONE_STATUS_LABEL", "Done"),
        page_size=_int_env("ITEMS_PAGE_SIZE", 500),
        max_pages=_int_env("ITEMS_MAX_PAGES", 20),
        request_timeout=_int_env("REQUEST_TIMEOUT", 30),
        slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL") or None,
        slack_notifications_enabled=_bool_env("SLACK_NOTIFICATIONS_ENABLED"),
        output_json_path=os.getenv("OUTPUT_JSON_PATH") or None,
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_env("PORT", 3001),
    )

# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Mirrowel

"""
Quota snapshot renderer.

Turns a QuotaSnapshot into a rich table or a JSON document. Rendering is a
pure function of the snapshot plus the chosen time zone.
"""

import json
from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from quota_library.core.constants import NO_DATA, RESET_DATE_THRESHOLD_HOURS
from quota_library.core.errors import ConfigurationError
from quota_library.core.types import AccountStatus, DisplayRow, QuotaSnapshot
from quota_library.usage.projection import flatten_rows


# =============================================================================
# DISPLAY CONFIGURATION
# =============================================================================

TABLE_HEADERS = ["Account", "Status", "Model", "Remaining", "Delta", "Reset"]

# Status colors: status -> rich style
STATUS_STYLES = {
    AccountStatus.OK: "green",
    AccountStatus.BANNED: "bold red",
    AccountStatus.NO_MODELS: "yellow",
    AccountStatus.ERROR: "red",
}

# Remaining-percent thresholds for coloring: (minimum percent, style)
QUOTA_STYLES = [
    (50.0, "green"),
    (20.0, "yellow"),
    (0.0, "red"),
]

# =============================================================================


def resolve_timezone(name: Optional[str] = None) -> Tuple[tzinfo, str]:
    """
    Resolve a time zone name to a tzinfo and its display name.

    With no name the local zone is used.

    Raises:
        ConfigurationError: If the zone name is unknown
    """
    if name:
        try:
            return ZoneInfo(name), name
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ConfigurationError(
                f"Unknown time zone: {name}",
                "Use an IANA zone name such as America/New_York.",
            ) from e

    local = datetime.now().astimezone().tzinfo or timezone.utc
    return local, local.tzname(None) or str(local)


def format_reset_time(
    reset_time: Optional[datetime],
    tz: tzinfo,
    now: Optional[datetime] = None,
) -> str:
    """
    Format a reset instant for display.

    More than 8 hours away shows the date ("Jan 5, 3:04 PM"), otherwise
    only the time ("3:04 PM").
    """
    if reset_time is None:
        return NO_DATA
    if reset_time.tzinfo is None:
        reset_time = reset_time.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)

    local_dt = reset_time.astimezone(tz)
    hour = local_dt.strftime("%I").lstrip("0") or "12"
    clock = f"{hour}:{local_dt.strftime('%M %p')}"

    if reset_time - now > timedelta(hours=RESET_DATE_THRESHOLD_HOURS):
        return f"{local_dt.strftime('%b')} {local_dt.day}, {clock}"
    return clock


def quota_style(percent: Optional[float]) -> str:
    if percent is None:
        return "dim"
    for threshold, style in QUOTA_STYLES:
        if percent >= threshold:
            return style
    return "red"


def delta_style(value: Optional[float]) -> str:
    if value is None:
        return "dim"
    if value > 0:
        return "green"
    if value < 0:
        return "red"
    return ""


def row_cells(row: DisplayRow, tz: tzinfo, now: Optional[datetime] = None) -> List[str]:
    """Plain cell values for one row; identity/status only on a group's first row."""
    return [
        row.identity if row.first_in_group else "",
        row.status if row.first_in_group else "",
        row.model_label,
        row.quota_str,
        row.delta,
        format_reset_time(row.reset_time, tz, now) if not row.is_gap else NO_DATA,
    ]


class QuotaViewer:
    """Renders snapshots to a rich console."""

    def __init__(
        self,
        console: Optional[Console] = None,
        timezone_name: Optional[str] = None,
        account_count: Optional[int] = None,
    ):
        self.console = console or Console()
        self.tz, self.timezone_name = resolve_timezone(timezone_name)
        self.account_count = account_count

    # =========================================================================
    # JSON
    # =========================================================================

    def render_json(self, snapshot: QuotaSnapshot) -> str:
        return json.dumps(snapshot.to_dict(self.timezone_name), indent=2)

    def show_json(self, snapshot: QuotaSnapshot) -> None:
        # Bypass rich markup/highlighting so stdout stays valid JSON
        self.console.file.write(self.render_json(snapshot) + "\n")
        self.console.file.flush()

    # =========================================================================
    # TABLE
    # =========================================================================

    def build_table(self, snapshot: QuotaSnapshot, now: Optional[datetime] = None) -> Table:
        """Build the quota table, one row per DisplayRow."""
        table = Table(box=box.ASCII, show_header=True, header_style="bold")
        for header in TABLE_HEADERS:
            table.add_column(header, no_wrap=True)

        for row in flatten_rows(snapshot.groups):
            account, status, model, remaining, delta, reset = row_cells(row, self.tz, now)
            table.add_row(
                Text(account, style="cyan"),
                Text(status, style=STATUS_STYLES.get(row.status, "")),
                model,
                Text(remaining, style=quota_style(row.percent)),
                Text(delta, style=delta_style(row.delta_value)),
                reset,
            )
        return table

    def show_table(self, snapshot: QuotaSnapshot, clear: bool = False) -> None:
        if clear:
            self.console.clear()

        accounts = (
            self.account_count if self.account_count is not None else len(snapshot.groups)
        )
        self.console.print(
            f"[bold cyan]Antigravity Quota Check[/bold cyan] - {snapshot.timestamp.isoformat()}"
        )
        self.console.print(f"Timezone: {self.timezone_name}")
        self.console.print(f"Accounts: {accounts}")
        self.console.print("Delta: change since previous refresh")
        self.console.print()
        self.console.print(self.build_table(snapshot))

        if snapshot.diagnostics:
            self.console.print()
            self.console.print("[bold red]Errors:[/bold red]")
            for diagnostic in snapshot.diagnostics:
                self.console.print(
                    Text(f"- {diagnostic.identity}: {diagnostic.message}")
                )

from __future__ import annotations

import datetime as dt
import secrets


def generate_id(prefix: str, now: dt.datetime | None = None) -> str:
    """Public identifier like INV-202506-3F9A1C2B; the month prefix keeps ids roughly sortable."""
    stamp = (now or dt.datetime.now(dt.timezone.utc)).strftime("%Y%m")
    return f"{prefix.upper()}-{stamp}-{secrets.token_hex(4).upper()}"

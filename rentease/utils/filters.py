"""Jinja filters and date formatting helpers."""
from datetime import datetime, date, timezone
import pytz

LOCAL_TZ = pytz.timezone("Europe/Zagreb")


def fmt_iso_local(value, with_time: bool = False) -> str:
    """
    Format a date/datetime (or ISO string) in Zagreb local time as
    'dd.mm.yyyy.' ('dd.mm.yyyy. HH:MM' with ``with_time``).
    Supports:
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DDTHH:MM:SS' with or without 'Z' / '+00:00'
    On parse error, returns the original value (so the UI never goes blank).
    """
    if value is None or value == "":
        return ""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return value.strftime("%d.%m.%Y.")
    else:
        s = str(value).strip()
        s_norm = s.replace("T", " ")
        if s_norm.endswith("Z"):
            s_norm = s_norm[:-1] + "+00:00"
        if ":" not in s_norm:
            try:
                return datetime.strptime(s_norm, "%Y-%m-%d").strftime("%d.%m.%Y.")
            except ValueError:
                return s
        try:
            dt = datetime.fromisoformat(s_norm)
        except ValueError:
            return s

    # If naive datetime, assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    local = dt.astimezone(LOCAL_TZ)
    if with_time:
        return local.strftime("%d.%m.%Y. %H:%M")
    return local.strftime("%d.%m.%Y.")


def euro(value) -> str:
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        return str(value)
    if amount == int(amount):
        return f"€{int(amount)}"
    return f"€{amount:.2f}"


def stars(value) -> str:
    """Star glyphs for a 0..5 rating, half rounding up."""
    try:
        count = int(float(value or 0) + 0.5)
    except (TypeError, ValueError):
        return ""
    return "\u2605" * max(0, min(count, 5))


def register_filters(app):
    app.jinja_env.filters["fmt_iso_local"] = fmt_iso_local
    app.jinja_env.filters["euro"] = euro
    app.jinja_env.filters["stars"] = stars

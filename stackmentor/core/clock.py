from datetime import datetime, timezone


def utc_now_naive() -> datetime:
    """La BD guarda DateTime naive; la regla es guardarlo siempre en UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)

from datetime import datetime, timezone

def utcnow() -> datetime:
    # naive UTC, the way the DateTime columns store it
    return datetime.now(timezone.utc).replace(tzinfo=None)

def order_number(delivery_id: int, created_at: datetime) -> str:
    return f"SP{created_at.year}-{delivery_id:03d}"

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms(moment: datetime | None = None) -> int:
    moment = moment or utcnow()
    return int(moment.timestamp() * 1000)

"""RateLimitCounter aggregate: a fixed-window hit count for one (rule, client, window).

Counters are versioned like every aggregate, so two concurrent hits on the
same window cannot both write a stale count.
"""

from datetime import UTC, datetime, timedelta

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


def window_start(now: datetime, window_seconds: int) -> datetime:
    epoch = int(now.timestamp())
    return datetime.fromtimestamp(epoch - epoch % window_seconds, tz=UTC)


def counter_key(rule_id, client_key: str, start: datetime) -> str:
    return f"{rule_id}:{client_key}:{int(start.timestamp())}"


@storefront.aggregate
class RateLimitCounter:
    key: String(required=True, max_length=400, unique=True)
    rule_id: Identifier(required=True)
    client_key: String(required=True, max_length=255)
    window_start: DateTime(required=True)
    window_end: DateTime(required=True)
    count: Integer(default=0, min_value=0)

    @classmethod
    def open(cls, rule, client_key: str, now: datetime):
        start = window_start(now, rule.window_seconds)
        return cls(
            key=counter_key(rule.id, client_key, start),
            rule_id=str(rule.id),
            client_key=client_key,
            window_start=start,
            window_end=start + timedelta(seconds=rule.window_seconds),
            count=0,
        )

    def hit(self) -> int:
        self.count += 1
        return self.count

    def retry_after(self, now: datetime) -> int:
        return max(1, int((self.window_end - now).total_seconds()))

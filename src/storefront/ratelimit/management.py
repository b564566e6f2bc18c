"""Rate limit rules (admin) and the per-request hit command."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ratelimit.counter import RateLimitCounter, counter_key, window_start
from storefront.ratelimit.rule import RateLimitRule
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, NotFound, RateLimited
from storefront.shared.pagination import iter_all
from storefront.utils.logging import logger


@storefront.command(part_of="RateLimitRule")
class CreateRateLimitRule:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    name = String(required=True, max_length=100)
    description = Text()
    path_prefix = String(required=True, max_length=255)
    limit = Integer(required=True, min_value=1)
    window_seconds = Integer(required=True, min_value=1)
    priority = Integer(default=0)
    is_active = Boolean(default=True)


@storefront.command(part_of="RateLimitRule")
class UpdateRateLimitRule:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    rule_id = Identifier(required=True)
    description = Text()
    path_prefix = String(max_length=255)
    limit = Integer(min_value=1)
    window_seconds = Integer(min_value=1)
    priority = Integer()
    is_active = Boolean()


@storefront.command(part_of="RateLimitRule")
class DeleteRateLimitRule:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    rule_id = Identifier(required=True)


@storefront.command(part_of="RateLimitCounter")
class RecordRequestHit:
    path = String(required=True, max_length=500)
    client_key = String(required=True, max_length=255)


@storefront.command(part_of="RateLimitCounter")
class CleanupRateLimitCounters:
    """Delete counters whose window has already closed."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)


def load_rule(rule_id) -> RateLimitRule:
    try:
        return current_domain.repository_for(RateLimitRule).get(rule_id)
    except ObjectNotFoundError:
        raise NotFound(f"Rate limit rule {rule_id} not found", field="rule_id") from None


def active_rules() -> list[RateLimitRule]:
    query = current_domain.repository_for(RateLimitRule)._dao.query.filter(is_active=True).order_by("-priority")
    return list(query.all().items)


@storefront.command_handler(part_of=RateLimitRule)
class RateLimitRuleHandler:
    @handle(CreateRateLimitRule)
    def create_rule(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        repo = current_domain.repository_for(RateLimitRule)
        if repo._dao.query.filter(name=command.name).all().items:
            raise Conflict(f"Rate limit rule '{command.name}' already exists", field="name")

        rule = RateLimitRule.create(
            name=command.name,
            path_prefix=command.path_prefix,
            limit=command.limit,
            window_seconds=command.window_seconds,
            description=command.description,
            priority=command.priority,
            is_active=command.is_active,
        )
        repo.add(rule)
        logger.info("Rate limit rule created", rule_id=str(rule.id), name=rule.name)
        return str(rule.id)

    @handle(UpdateRateLimitRule)
    def update_rule(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        rule = load_rule(command.rule_id)
        rule.update(
            description=command.description,
            path_prefix=command.path_prefix,
            limit=command.limit,
            window_seconds=command.window_seconds,
            priority=command.priority,
            is_active=command.is_active,
        )
        current_domain.repository_for(RateLimitRule).add(rule)

    @handle(DeleteRateLimitRule)
    def delete_rule(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        rule = load_rule(command.rule_id)
        current_domain.repository_for(RateLimitRule)._dao.delete(rule)


@storefront.command_handler(part_of=RateLimitCounter)
class RequestHitHandler:
    @handle(RecordRequestHit)
    def record_hit(self, command):
        """Count the request against every matching rule. Raises RateLimited on the first exceeded rule."""
        now = datetime.now(UTC)
        repo = current_domain.repository_for(RateLimitCounter)

        for rule in active_rules():
            if not rule.applies_to(command.path):
                continue

            key = counter_key(rule.id, command.client_key, window_start(now, rule.window_seconds))
            existing = repo._dao.query.filter(key=key).all().items
            counter = existing[0] if existing else RateLimitCounter.open(rule, command.client_key, now)

            if counter.count >= rule.limit:
                logger.warning(
                    "Rate limit exceeded",
                    rule=rule.name,
                    client=command.client_key,
                    path=command.path,
                )
                raise RateLimited(
                    f"Rate limit exceeded: {rule.limit} requests per {rule.window_seconds}s",
                    retry_after=counter.retry_after(now),
                )

            counter.hit()
            repo.add(counter)

    @handle(CleanupRateLimitCounters)
    def cleanup_counters(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        dao = current_domain.repository_for(RateLimitCounter)._dao
        expired = list(iter_all(dao.query.filter(window_end__lt=datetime.now(UTC))))
        for counter in expired:
            dao.delete(counter)

        logger.info("Rate limit counters cleaned up", removed=len(expired), by=command.actor_id)
        return len(expired)

"""Banner management: commands, handler and read helpers."""

from datetime import UTC, datetime

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.banners.banner import BANNER_FIELDS, Banner
from storefront.domain import storefront
from storefront.shared.access import Actor, Role
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, iter_all, paginate, paginate_list
from storefront.utils.logging import logger


@storefront.command(part_of="Banner")
class CreateBanner:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    title = String(required=True, max_length=255)
    description = Text()
    banner_type = String(max_length=20)
    position = String(max_length=20)
    status = String(max_length=20)
    image_url = String(max_length=500)
    video_url = String(max_length=500)
    text_content = Text()
    button_text = String(max_length=100)
    link_url = String(max_length=500)
    alt_text = String(max_length=255)
    priority = Integer(default=0)
    start_date = DateTime()
    end_date = DateTime()


@storefront.command(part_of="Banner")
class UpdateBanner:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    banner_id = Identifier(required=True)
    title = String(max_length=255)
    description = Text()
    banner_type = String(max_length=20)
    position = String(max_length=20)
    status = String(max_length=20)
    image_url = String(max_length=500)
    video_url = String(max_length=500)
    text_content = Text()
    button_text = String(max_length=100)
    link_url = String(max_length=500)
    alt_text = String(max_length=255)
    priority = Integer()
    start_date = DateTime()
    end_date = DateTime()


@storefront.command(part_of="Banner")
class DeleteBanner:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    banner_id = Identifier(required=True)


def _details(command) -> dict:
    return {key: getattr(command, key) for key in BANNER_FIELDS if key != "title"}


def load_banner(banner_id) -> Banner:
    try:
        return current_domain.repository_for(Banner).get(banner_id)
    except ObjectNotFoundError:
        raise NotFound(f"Banner {banner_id} not found", field="banner_id") from None


@storefront.command_handler(part_of=Banner)
class BannerHandler:
    @handle(CreateBanner)
    def create_banner(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        actor.require(Role.STAFF)
        banner = Banner.create(command.title, created_by=actor.user_id, **_details(command))
        current_domain.repository_for(Banner).add(banner)
        logger.info("Banner created", banner_id=str(banner.id), title=banner.title)
        return str(banner.id)

    @handle(UpdateBanner)
    def update_banner(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        banner = load_banner(command.banner_id)
        banner.update(title=command.title, **_details(command))
        current_domain.repository_for(Banner).add(banner)

    @handle(DeleteBanner)
    def delete_banner(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        banner = load_banner(command.banner_id)
        current_domain.repository_for(Banner)._dao.delete(banner)
        logger.info("Banner deleted", banner_id=str(banner.id))


def list_banners(status=None, position=None, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if status:
        criteria["status"] = status
    if position:
        criteria["position"] = position
    query = current_domain.repository_for(Banner)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def active_banners(position=None, page: int | None = None, limit: int | None = None) -> Page:
    """Banners on display now, by priority then newest first."""
    now = datetime.now(UTC)
    criteria = {"status": "active"}
    if position:
        criteria["position"] = position
    query = current_domain.repository_for(Banner)._dao.query.filter(**criteria)

    showing = [banner for banner in iter_all(query) if banner.is_displayed_at(now)]
    showing.sort(key=lambda banner: banner.created_at, reverse=True)
    showing.sort(key=lambda banner: banner.priority or 0)
    return paginate_list(showing, page, limit)

"""Blog CRUD for readers and staff."""
from datetime import date as date_type
from typing import Any, Dict, List

from counsel_booking import config
from counsel_booking.errors import NotFoundError
from counsel_booking.http_client import BackendClient
from counsel_booking.logging_config import get_logger
from counsel_booking.models import Blog, parse_many

logger = get_logger(__name__)


def blog_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Backend body for create/update; tags travel as one comma string."""
    tags = data.get("tags")
    if isinstance(tags, (list, tuple)):
        tags = ", ".join(tags)
    return {
        "title": data.get("title"),
        "description": data.get("description"),
        "content": data.get("content"),
        "category": data.get("category"),
        "author": data.get("author"),
        "readTime": data.get("readTime") or config.DEFAULT_READ_TIME,
        "views": data.get("views") or config.DEFAULT_VIEWS,
        "date": data.get("date") or date_type.today().isoformat(),
        "tags": tags or "",
    }


class BlogService:
    """Blog posts."""

    def __init__(self, client: BackendClient):
        self.client = client

    def get_blogs(self) -> List[Blog]:
        return parse_many(Blog.from_api, self.client.get("blogs"), "blog")

    def get_blog(self, blog_id: Any) -> Blog:
        raw = self.client.get(f"blogs/{blog_id}")
        if not raw:
            raise NotFoundError("Blog not found")
        return Blog.from_api(raw)

    def create_blog(self, data: Dict[str, Any]) -> Any:
        result = self.client.post("blogs", json=blog_payload(data))
        logger.info("blog_created", title=data.get("title"))
        return result

    def update_blog(self, blog_id: Any, data: Dict[str, Any]) -> Any:
        return self.client.put(f"blogs/{blog_id}", json=blog_payload(data))

    def delete_blog(self, blog_id: Any) -> Any:
        result = self.client.delete(f"blogs/{blog_id}")
        logger.info("blog_deleted", blog_id=blog_id)
        return result

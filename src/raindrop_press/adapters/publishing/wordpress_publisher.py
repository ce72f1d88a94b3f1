"""WordPress REST API publisher for link posts."""

import logging
from typing import Any, Optional

import httpx

from raindrop_press.core import PublishedPost, PublishError, Publisher, RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

USER_AGENT = "RaindropPress/1.0 (Automated Link Sync Bot)"


class WordPressPublisher(Publisher):
    """Create link posts through the WordPress REST API."""

    def __init__(
        self,
        endpoint: str,
        username: str,
        app_password: str,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize WordPress publisher.

        Args:
            endpoint: REST API base or posts URL, e.g.
                ``https://example.com/wp-json/wp/v2``
            username: WordPress user name
            app_password: Application password for that user
            retry_policy: Retry settings for each create call
            timeout: HTTP timeout in seconds
        """
        endpoint = endpoint.rstrip("/")
        self.endpoint = endpoint if endpoint.endswith("/posts") else f"{endpoint}/posts"
        self.auth = httpx.BasicAuth(username, app_password)
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout

    async def publish(self, title: str, content: str, status: str = "publish") -> PublishedPost:
        payload = {
            "title": title,
            "content": content,
            "status": status,
            "format": "link",
        }

        post = await retry_with_backoff(lambda: self._create_post(payload), self.retry_policy)
        logger.info("Created post %s: %s", post.id, post.link)
        return post

    async def _create_post(self, payload: dict[str, Any]) -> PublishedPost:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    json=payload,
                    auth=self.auth,
                    headers={"User-Agent": USER_AGENT},
                )
        except httpx.HTTPError as e:
            raise PublishError(f"Failed to create WordPress post: {e}", cause=e) from e

        if not response.is_success:
            error_data = self._error_body(response)
            raise PublishError(
                error_data.get("message")
                or f"WordPress API error: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
                code=error_data.get("code"),
                data=error_data,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PublishError(
                "Invalid response from WordPress API: not JSON", code="invalid_response", cause=e
            ) from e

        if not isinstance(data, dict) or not (data.get("id") and data.get("link") and data.get("title")):
            raise PublishError(
                "Invalid response from WordPress API: missing required fields",
                code="invalid_response",
                data=data,
            )

        title = data["title"]
        if isinstance(title, dict):
            title = title.get("rendered", "")

        return PublishedPost(
            id=int(data["id"]),
            link=data["link"],
            title=str(title),
            status=data.get("status", payload["status"]),
        )

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {"message": response.text}
        return data if isinstance(data, dict) else {"message": str(data)}

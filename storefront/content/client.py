"""Read-only HTTP client for the content store query API."""
import json
from typing import Any, Dict, Optional
import httpx
from storefront.config import settings
from storefront.content.errors import handle_content_error
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class ContentStoreClient:
    """
    Runs GROQ queries against the content store over HTTPS.

    Only reads are issued and no API token is ever sent, so the client is
    safe to point at the public CDN endpoint.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2024-01-01",
        use_cdn: bool = True,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            project_id: Content store project identifier
            dataset: Dataset name
            api_version: Dated API version
            use_cdn: Whether to read through the CDN endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not project_id:
            raise ValueError("Missing required content store project id")

        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version.lstrip("v")
        host = "apicdn.sanity.io" if use_cdn else "api.sanity.io"
        self.base_url = f"https://{project_id}.{host}/v{self.api_version}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"}
        )

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ContentStoreClient":
        """Build a client from application settings."""
        return cls(
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            api_version=settings.sanity_api_version,
            use_cdn=settings.sanity_use_cdn,
            timeout=settings.request_timeout,
            transport=transport
        )

    @staticmethod
    def encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, str]:
        """Encode query parameters as $-prefixed JSON values."""
        return {f"${name}": json.dumps(value) for name, value in (params or {}).items()}

    async def fetch(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None,
        no_store: bool = False
    ) -> Any:
        """
        Run a query and return its result.

        Args:
            query: GROQ query text
            params: Query parameters
            no_store: Ask intermediaries for a fresh answer

        Returns:
            The decoded "result" member of the response

        Raises:
            ContentStoreError: On any transport, HTTP or decoding failure
        """
        request_params = {"query": query, **self.encode_params(params)}
        headers = {"Cache-Control": "no-cache"} if no_store else None

        try:
            response = await self._client.get(
                f"/data/query/{self.dataset}",
                params=request_params,
                headers=headers
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise handle_content_error(e) from e

        if not isinstance(body, dict) or "result" not in body:
            raise handle_content_error(ValueError("Malformed content store response: missing result"))

        logger.debug(f"Query answered in {body.get('ms', '?')}ms")
        return body["result"]

    async def aclose(self) -> None:
        await self._client.aclose()

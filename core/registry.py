"""npm registry client."""

import logging

import httpx

from .errors import RegistryError

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.com"


class RegistryClient:
    """Looks up the latest published version of npm packages."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize registry client.

        Args:
            registry_url: Base URL of the registry
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used to stub the network
        """
        self.registry_url = registry_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "RegistryClient":
        self._client = self._new_client()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def package_url(self, package_name: str) -> str:
        return f"{self.registry_url}/{package_name}"

    async def fetch_latest(self, package_name: str) -> str:
        """Get the ``latest`` dist-tag of a package.

        Args:
            package_name: Name of the package

        Returns:
            Latest version string

        Raises:
            RegistryError: On transport failure, non-2xx status or an
                unexpected response body
        """
        url = self.package_url(package_name)
        logger.debug("GET %s", url)

        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with self._new_client() as client:
                    response = await client.get(url)
        except httpx.TimeoutException as e:
            raise RegistryError(package_name, f"timeout fetching {url}") from e
        except httpx.HTTPError as e:
            raise RegistryError(package_name, f"network error: {e}") from e

        if not response.is_success:
            raise RegistryError(
                package_name,
                f"registry returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            metadata = response.json()
        except ValueError as e:
            raise RegistryError(package_name, "response is not valid JSON") from e

        return self._extract_latest(package_name, metadata)

    @staticmethod
    def _extract_latest(package_name: str, metadata) -> str:
        dist_tags = metadata.get("dist-tags") if isinstance(metadata, dict) else None
        latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None
        if not isinstance(latest, str) or not latest:
            raise RegistryError(package_name, "response has no dist-tags.latest")
        return latest

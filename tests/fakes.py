from typing import Optional

import anyio
import httpx

from gce_metadata import MetadataClient

GOOGLE_HEADERS = {"Metadata-Flavor": "Google"}
METADATA_PREFIX = "/computeMetadata/v1/"


class FakeMetadataServer:
    """Serves canned metadata responses through an `httpx.MockTransport`.

    Records every request so tests can count how often a path was hit.
    """

    def __init__(self, on_gce: bool = True, delay: float = 0) -> None:
        self.on_gce = on_gce
        self.delay = delay
        self.responses = {}  # type: dict[str, tuple[int, str, str]]
        self.errors = {}  # type: dict[str, Exception]
        self.delays = {}  # type: dict[str, float]
        self.requests = []  # type: list[httpx.Request]

    def add(
        self,
        path: str,
        text: str = "",
        status_code: int = 200,
        content_type: str = "application/text",
    ) -> None:
        self.responses[path] = (status_code, text, content_type)

    def fail(self, path: str, exc: Exception) -> None:
        self.errors[path] = exc

    def count(self, path: str) -> int:
        """Number of requests made for a metadata path, or "/" for the probe."""
        return len([r for r in self.requests if metadata_path(r) == path])

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = metadata_path(request)
        delay = self.delays.get(path, self.delay)
        if delay:
            await anyio.sleep(delay)
        if request.headers.get("Metadata-Flavor") != "Google":
            return httpx.Response(403)

        if path in self.errors:
            raise self.errors[path]
        if path == "/":
            if not self.on_gce:
                raise httpx.ConnectError("Connection refused", request=request)
            return httpx.Response(200, headers=GOOGLE_HEADERS)
        if path in self.responses:
            status_code, text, content_type = self.responses[path]
            headers = {**GOOGLE_HEADERS, "Content-Type": content_type}
            return httpx.Response(status_code, headers=headers, text=text)
        return httpx.Response(404, headers=GOOGLE_HEADERS)

    def client(self, http_client: Optional[httpx.AsyncClient] = None, **kwargs) -> MetadataClient:
        if http_client is None:
            http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return MetadataClient(http_client=http_client, **kwargs)


def metadata_path(request: httpx.Request) -> str:
    path = request.url.path
    if path.startswith(METADATA_PREFIX):
        return path[len(METADATA_PREFIX) :]
    return path

"""Async client for the Google Compute Engine metadata server.

See https://cloud.google.com/compute/docs/metadata/overview for the API.
"""

import asyncio
from collections import Counter
from typing import Optional

import httpx
from loguru import logger

from .config import MetadataConfig
from .exceptions import ClientClosed, NotOnGce, PathNotFound, TransportFailure
from .utils import (
    last_path_segment,
    normalize_service_account,
    parse_string_list,
    split_lines,
)

# Required header per https://cloud.google.com/compute/docs/metadata/overview#parts-of-a-request
METADATA_FLAVOR_HEADER = "Metadata-Flavor"
METADATA_FLAVOR_VALUE = "Google"


class MetadataClient:
    """Client for the metadata server of the VM the process is running on.

    Values are fetched lazily and cached for the lifetime of the client,
    since they don't change for the lifetime of a VM.

    Example:
        >>> async with MetadataClient() as metadata:
        ...     if await metadata.is_on_gce():
        ...         zone = await metadata.get_zone()

    Parameters
    ----------
    http_client : `Optional[httpx.AsyncClient]`
        Client to send requests with. The MetadataClient takes ownership of it
        and closes it when it is closed itself.
    throw_if_not_on_gce : `bool`
        If `True`, accessors raise `NotOnGce` when not running on GCE.
        If `False`, they return `None` instead.
    config : `Optional[MetadataConfig]`
        Settings to use. Read from the environment if omitted.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        throw_if_not_on_gce: bool = False,
        config: Optional[MetadataConfig] = None,
    ) -> None:
        self.config = config or MetadataConfig()
        self.throw_if_not_on_gce = throw_if_not_on_gce
        self.metadata_host = self.config.host
        self.probe_url = f"http://{self.metadata_host}/"
        self.base_url = f"http://{self.metadata_host}/computeMetadata/v1/"

        headers = {
            METADATA_FLAVOR_HEADER: METADATA_FLAVOR_VALUE,
            "User-Agent": self.config.user_agent,
        }
        if http_client is None:
            http_client = httpx.AsyncClient(headers=headers, timeout=self.config.timeout)
        else:
            http_client.headers.update(headers)
            http_client.timeout = httpx.Timeout(self.config.timeout)
        self._client = http_client
        self._closed = False

        # None until the presence probe has completed
        self._on_gce: Optional[bool] = None
        self._presence_lock = asyncio.Lock()
        self._cache: dict[str, str] = {}
        # Only paths with callers in flight have a lock
        self._path_locks: dict[str, asyncio.Lock] = {}
        self._path_lock_users: Counter[str] = Counter()

    async def __aenter__(self) -> "MetadataClient":
        self._check_open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._closed

    async def aclose(self) -> None:
        """Close the underlying HTTP client. Further calls raise `ClientClosed`."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()

    def _check_open(self) -> None:
        if self._closed:
            raise ClientClosed()

    async def is_on_gce(self) -> bool:
        """Reports whether this process is running on Google Compute Engine.

        The metadata server is probed at most once per client; concurrent
        callers wait for the same probe.
        """
        self._check_open()
        if self._on_gce is not None:
            return self._on_gce
        async with self._presence_lock:
            self._check_open()
            if self._on_gce is None:
                self._on_gce = await self._probe()
                logger.info("Running on GCE: {}", self._on_gce)
        return self._on_gce

    async def _probe(self) -> bool:
        logger.debug("Probing metadata server at {}", self.probe_url)
        self._check_open()
        try:
            res = await self._client.get(self.probe_url)
        except Exception as e:
            if self._closed:
                raise ClientClosed() from e
            # Can't reach the metadata server, so we are probably not on GCE.
            logger.warning("Metadata server at {} unavailable: {!r}", self.probe_url, e)
            return False
        # Closed while the probe was in flight
        self._check_open()
        return METADATA_FLAVOR_VALUE in res.headers.get_list(METADATA_FLAVOR_HEADER)

    async def get_cached_string(self, path: str) -> Optional[str]:
        """Get the raw value of a metadata path, relative to `computeMetadata/v1/`.

        Each path is fetched at most once per client. Returns `None` if not
        running on GCE and the client is not strict.

        Raises
        ------
        `NotOnGce`
            Not running on GCE and `throw_if_not_on_gce` is set.
        `PathNotFound`
            The metadata server has no value for `path`.
        `TransportFailure`
            The request failed or the server responded with an error.
        """
        self._check_open()
        if path in self._cache:
            logger.debug("Cache hit for {}", path)
            return self._cache[path]

        lock = self._path_locks.setdefault(path, asyncio.Lock())
        self._path_lock_users[path] += 1
        try:
            async with lock:
                # Another caller may have fetched it while we waited
                if path in self._cache:
                    return self._cache[path]
                self._check_open()

                if not await self.is_on_gce():
                    if self.throw_if_not_on_gce:
                        raise NotOnGce()
                    return None

                value = await self._fetch(path)
                self._cache[path] = value
                return value
        finally:
            self._path_lock_users[path] -= 1
            if not self._path_lock_users[path]:
                del self._path_lock_users[path]
                del self._path_locks[path]

    async def _fetch(self, path: str) -> str:
        url = f"{self.base_url}{path}"
        logger.debug("Fetching {}", url)
        self._check_open()
        try:
            res = await self._client.get(url)
        except httpx.HTTPError as e:
            if self._closed:
                raise ClientClosed() from e
            raise TransportFailure(path, message=f"Request for {url} failed: {e!r}") from e
        # Closed while the request was in flight
        self._check_open()

        if res.status_code == 404:
            raise PathNotFound(path)
        if not res.is_success:
            raise TransportFailure(path, status_code=res.status_code)
        return res.text

    async def get_trimmed_string(self, path: str) -> Optional[str]:
        value = await self.get_cached_string(path)
        return value.strip() if value is not None else None

    async def get_lines(self, path: str) -> Optional[list[str]]:
        """Get a newline separated listing as a list of non-empty lines."""
        value = await self.get_cached_string(path)
        return split_lines(value) if value is not None else None

    async def get_string_list(self, path: str) -> Optional[list[str]]:
        """Get a value that is a JSON array of strings."""
        value = await self.get_cached_string(path)
        if value is None:
            return None
        try:
            return parse_string_list(value)
        except ValueError as e:
            raise TransportFailure(
                path, message=f"Metadata path '{path}' is not a JSON list of strings."
            ) from e

    async def get_project_id(self) -> Optional[str]:
        """Returns the current instance's project ID string."""
        return await self.get_cached_string("project/project-id")

    async def get_numeric_project_id(self) -> Optional[str]:
        """Returns the current instance's numeric project ID."""
        return await self.get_cached_string("project/numeric-project-id")

    async def get_instance_id(self) -> Optional[str]:
        """Returns the current VM's numeric instance ID."""
        return await self.get_cached_string("instance/id")

    async def get_internal_ip(self) -> Optional[str]:
        """Returns the instance's primary internal IP address."""
        return await self.get_trimmed_string("instance/network-interfaces/0/ip")

    async def get_external_ip(self) -> Optional[str]:
        """Returns the instance's primary external (public) IP address."""
        return await self.get_trimmed_string(
            "instance/network-interfaces/0/access-configs/0/external-ip"
        )

    async def get_hostname(self) -> Optional[str]:
        """Returns the instance's hostname, of the form `{instanceID}.c.{projID}.internal`."""
        return await self.get_trimmed_string("instance/hostname")

    async def get_instance_name(self) -> Optional[str]:
        return await self.get_trimmed_string("instance/name")

    async def get_zone(self) -> Optional[str]:
        """Returns the current VM's zone, such as `us-central1-b`."""
        zone = await self.get_trimmed_string("instance/zone")
        # zone is of the form "projects/<projNum>/zones/<zoneName>"
        return last_path_segment(zone) if zone is not None else None

    async def get_instance_tags(self) -> Optional[list[str]]:
        """Returns the user-defined instance tags, assigned when creating the instance."""
        return await self.get_string_list("instance/tags")

    async def get_instance_attributes(self) -> Optional[list[str]]:
        """Returns the names of the user-defined attributes of this VM.

        Values can be obtained with `get_instance_attribute_value`.
        """
        return await self.get_lines("instance/attributes/")

    async def get_project_attributes(self) -> Optional[list[str]]:
        """Returns the names of the user-defined attributes of the whole project.

        Values can be obtained with `get_project_attribute_value`.
        """
        return await self.get_lines("project/attributes/")

    async def get_instance_attribute_value(self, key: str) -> Optional[str]:
        return await self.get_trimmed_string(f"instance/attributes/{key}")

    async def get_project_attribute_value(self, key: str) -> Optional[str]:
        return await self.get_trimmed_string(f"project/attributes/{key}")

    async def get_email(self, service_account: Optional[str] = None) -> Optional[str]:
        """Returns the email address of a service account.

        `service_account` may be omitted, blank or `"default"` to use the
        instance's main account.
        """
        account = normalize_service_account(service_account)
        return await self.get_trimmed_string(f"instance/service-accounts/{account}/email")

    async def get_scopes(self, service_account: Optional[str] = None) -> Optional[list[str]]:
        """Returns the OAuth scopes of a service account.

        `service_account` may be omitted, blank or `"default"` to use the
        instance's main account.
        """
        account = normalize_service_account(service_account)
        return await self.get_lines(f"instance/service-accounts/{account}/scopes")

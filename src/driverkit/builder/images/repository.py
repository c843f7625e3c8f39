# src/driverkit/builder/images/repository.py
"""
Registry source for builder images.

Searches a Docker registry through the local daemon for a repository
string and recovers target and GCC versions from the returned image
names. A registry that cannot be reached only loses its own images:
the failure is logged and the source yields nothing.

Example:
    >>> cache = PatternCache()
    >>> source = RepoImageSource("docker.io/falcosecurity/driverkit", "ubuntu", "amd64", cache)
    >>> for image in source.load_images():
    ...     print(image.key, image.name)
"""

import logging
from typing import Any

import docker

from ..architecture import Architecture
from .models import ANY_TARGET, GCCVersion, Image, Target
from .patterns import PatternCache
from .sources import ImageSource

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 100


class RepoImageSource(ImageSource):
    """
    Image source backed by a Docker registry search.

    Attributes:
        repo: Repository string passed to the search
        target: Requested build target
        architecture: Requested architecture
    """

    def __init__(
        self,
        repo: str,
        target: Target | str,
        architecture: Architecture | str,
        pattern_cache: PatternCache | None = None,
        docker_client: Any | None = None,
        docker_host: str | None = None,
        timeout: int | None = None,
        proxy_url: str | None = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ):
        """
        Initialize the registry source.

        Args:
            repo: Repository to search, e.g. "docker.io/falcosecurity/driverkit"
            target: Build target used in the target-specific name pattern
            architecture: Build architecture, Debian or kernel spelling
            pattern_cache: Shared pattern cache (a private one if not given)
            docker_client: Docker client to use; left open for the caller.
                If not given, one is created per search and closed after it.
            docker_host: Remote daemon URL, e.g. "tcp://host:2375"
            timeout: Docker API timeout in seconds
            proxy_url: Proxy for the HTTP(S) connection to the Docker API
            limit: Maximum number of search results

        Raises:
            UnsupportedArchitectureError: If the architecture is unknown
            ValueError: If the target is blank
        """
        self.repo = repo
        self.target = target if isinstance(target, Target) else Target(target)
        self.architecture = (
            architecture
            if isinstance(architecture, Architecture)
            else Architecture.from_string(architecture)
        )
        self.limit = limit
        self._docker_client = docker_client
        self._owns_client = docker_client is None
        self._docker_host = docker_host
        self._timeout = timeout
        self._proxy_url = proxy_url

        cache = pattern_cache if pattern_cache is not None else PatternCache()
        self._patterns = cache.get(str(self.target), self.architecture.to_non_deb())

    def describe(self) -> str:
        return f"repository '{self.repo}'"

    def _get_docker_client(self) -> Any:
        """Get or create the Docker client."""
        if self._docker_client is None:
            kwargs: dict[str, Any] = {}
            if self._timeout is not None:
                kwargs["timeout"] = self._timeout
            if self._docker_host:
                client = docker.DockerClient(base_url=self._docker_host, **kwargs)
                logger.debug(f"Connected to remote Docker: {self._docker_host}")
            else:
                client = docker.from_env(**kwargs)
                logger.debug("Connected to local Docker daemon")
            if self._proxy_url:
                client.api.proxies.update({"http": self._proxy_url, "https": self._proxy_url})
                logger.debug(f"Using proxy {self._proxy_url} for Docker API requests")
            self._docker_client = client
        return self._docker_client

    def _close_client(self) -> None:
        """Close the Docker client if this source created it."""
        if not self._owns_client or self._docker_client is None:
            return
        client, self._docker_client = self._docker_client, None
        try:
            client.close()
        except Exception as e:
            logger.debug(f"Error closing Docker client: {e}")

    def _search(self) -> list[str]:
        """Run the registry search and return the result names."""
        client = self._get_docker_client()
        results = client.images.search(self.repo, limit=self.limit)
        return [result["name"] for result in results or [] if result.get("name")]

    def load_images(self) -> list[Image]:
        try:
            names = self._search()
        except Exception as e:
            logger.warning(f"Skipping repo {self.repo}: {e}")
            return []
        finally:
            self._close_client()

        images: list[Image] = []
        for name in names:
            images.extend(self._images_from_name(name))

        logger.debug(f"Loaded {len(images)} image(s) from repo {self.repo}")
        return images

    def _images_from_name(self, name: str) -> list[Image]:
        """Turn one search result into zero or more images."""
        match = self._patterns.match(name)
        if match is None:
            return []

        if not match.gcc_versions:
            logger.debug(f"Malformed image name: {name}")
            return []

        # Generic matches stay on the "any" target so that a target-specific
        # image from a lower priority source can still claim the same version.
        target = Target(match.target) if match.target else ANY_TARGET

        return [
            Image(target=target, gcc_version=GCCVersion.parse(version), name=name)
            for version in match.gcc_versions
        ]

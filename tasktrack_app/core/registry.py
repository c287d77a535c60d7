"""Registry of RedmineAPI instances keyed by (server URL, API key)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .redmine_client import RedmineAPI

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], RedmineAPI]


class ServiceRegistry:
    """Share one client (and therefore one request cache) per credential pair.

    Owned by whatever holds the application's service lifetime; the
    dashboard keeps one in ``st.session_state``.
    """

    def __init__(self, factory: ClientFactory | None = None):
        self._factory: ClientFactory = factory or RedmineAPI
        self._services: dict[str, RedmineAPI] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(server: str, api_key: str) -> str:
        return f"{server}:{api_key}"

    def get_service(self, server: str, api_key: str) -> RedmineAPI:
        key = self._key(server, api_key)
        with self._lock:
            service = self._services.get(key)
            if service is None:
                logger.info("Creating new Redmine service for %s", server)
                service = self._factory(server, api_key)
                self._services[key] = service
            else:
                logger.debug("Reusing existing Redmine service for %s", server)
        return service

    def clear_all_caches(self) -> None:
        logger.info("Clearing all Redmine service caches")
        with self._lock:
            services = list(self._services.values())
        for service in services:
            service.clear_cache()

    def clear_service_cache(self, server: str, api_key: str) -> None:
        service = self._services.get(self._key(server, api_key))
        if service is not None:
            logger.info("Clearing cache for service %s", server)
            service.clear_cache()

    def remove_service(self, server: str, api_key: str) -> None:
        with self._lock:
            if self._services.pop(self._key(server, api_key), None) is not None:
                logger.info("Removed Redmine service for %s", server)

    def service_count(self) -> int:
        return len(self._services)

"""
Service Lifecycle Supervisor

Main orchestrator for loading services, binding their configuration, and
starting and stopping them in a fixed order.
"""

import logging
from typing import List

from .config_store import ConfigStore
from .discovery import ModuleDiscovery
from .service_base import HookResult, ServiceBase, ServiceState
from .service_registry import ServiceRegistry

logger = logging.getLogger(__name__)

__all__ = ['HookResult', 'LifecycleSupervisor']


class LifecycleSupervisor:
    """
    Starts and stops every enabled service, one at a time, in registry order.

    A failing hook never prevents the next service from being started or
    stopped; the failure is logged by the service wrapper and reported in the
    returned results.
    """

    def __init__(self,
                 registry: ServiceRegistry,
                 config_store: ConfigStore,
                 discovery: ModuleDiscovery):
        self.registry = registry
        self.config_store = config_store
        self.discovery = discovery
        self._started = False

    def load_services(self) -> List[ServiceBase]:
        """
        Instantiate every discovered service and bind its configuration.

        Returns:
            The services that were registered
        """
        if self.registry.is_sealed:
            raise RuntimeError("Services have already been loaded")

        loaded = []
        for discovered in self.discovery.discover():
            try:
                service = discovered.factory()
            except Exception as e:
                logger.error(
                    f"Failed to construct service {discovered.factory.__name__} "
                    f"from module '{discovered.module_name}': {e!r}",
                    exc_info=True
                )
                continue

            try:
                self.registry.register(service)
            except ValueError as e:
                logger.error(f"Skipping service {service.info}: {e}")
                continue

            self.config_store.load(service)
            service._set_state(ServiceState.CONFIG_BOUND)
            loaded.append(service)

        self.registry.seal()
        return loaded

    async def start_all(self) -> List[HookResult]:
        """
        Load all services, then start the enabled ones.

        Returns:
            One result per started service, in start order
        """
        if self._started:
            raise RuntimeError("Services have already been started")
        self._started = True

        logger.info("Starting services...")
        self.load_services()

        results = []
        for service in self.registry.services:
            if service.config.is_enabled:
                results.append(await service.start())

        self._log_summary('started', results)
        logger.info("Services started.")
        return results

    async def stop_all(self) -> List[HookResult]:
        """
        Stop the enabled services, then save every service's configuration.

        Raises:
            OSError: If a configuration could not be saved

        Returns:
            One result per stopped service, in stop order
        """
        logger.info("Stopping services...")

        results = []
        for service in self.registry.services:
            if service.config.is_enabled and service.state != ServiceState.STOPPED:
                results.append(await service.stop())

        self.config_store.save_all(self.registry.services)
        self._log_summary('stopped', results)
        logger.info("Services stopped.")
        return results

    @staticmethod
    def _log_summary(past: str, results: List[HookResult]) -> None:
        failed = [result for result in results if result.failed]
        if failed:
            names = ', '.join(result.service.info.name for result in failed)
            logger.warning(f"{len(failed)} of {len(results)} services {past} with errors: {names}")
        else:
            logger.debug(f"{len(results)} services {past} cleanly")

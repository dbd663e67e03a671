"""
Service Module Discovery

Enumerates the modules that publish services: the host's built-in module
first, then every extension module found in the extensions directory.
"""

import importlib.util
import inspect
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Iterator, List, Optional, Type, Union

from .exceptions import ModuleLoadError
from .service_base import ServiceBase

logger = logging.getLogger(__name__)

EXTENSION_PACKAGE = "service_extensions"


@dataclass(frozen=True)
class DiscoveredService:
    """A service class together with the module that published it."""
    module: ModuleType
    factory: Type[ServiceBase]

    @property
    def module_name(self) -> str:
        return self.module.__name__


class ModuleDiscovery:
    """
    Finds service classes in the built-in module and in extension modules.

    Each module publishes its services through a ``get_services()`` function
    returning service classes. Extension modules are single ``.py`` files or
    packages placed directly inside the extensions directory and are visited
    in file name order.
    """

    def __init__(self, builtin_module: Optional[ModuleType],
                 extensions_dir: Union[str, Path, None] = "extensions"):
        self.builtin_module = builtin_module
        self.extensions_dir = Path(extensions_dir) if extensions_dir is not None else None
        self.failed_modules: List[ModuleLoadError] = []

    def discover(self) -> List[DiscoveredService]:
        """
        Collect service classes from every loadable module.

        A module that fails to load or enumerate is logged and skipped;
        the remaining modules are still visited.

        Returns:
            Discovered services in enumeration order
        """
        self.failed_modules = []
        discovered = []

        for module in self.iter_modules():
            try:
                factories = self.get_service_factories(module)
            except ModuleLoadError as e:
                logger.error(str(e))
                self.failed_modules.append(e)
                continue

            discovered.extend(DiscoveredService(module, factory) for factory in factories)
            logger.debug(f"Module '{module.__name__}' provides {len(factories)} services")

        logger.info(f"Discovered {len(discovered)} services")
        return discovered

    def iter_modules(self) -> Iterator[ModuleType]:
        """Yield the built-in module, then each extension module that imports cleanly."""
        if self.builtin_module is not None:
            yield self.builtin_module

        for path in self.extension_paths():
            try:
                yield self.load_extension(path)
            except ModuleLoadError as e:
                logger.error(str(e))
                self.failed_modules.append(e)

    def extension_paths(self) -> List[Path]:
        """List loadable module files in the extensions directory, sorted by name."""
        if self.extensions_dir is None:
            return []

        if not self.extensions_dir.is_dir():
            logger.warning(f"Extensions directory '{self.extensions_dir}' does not exist, skipping")
            return []

        try:
            items = sorted(self.extensions_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.error(f"Cannot read extensions directory '{self.extensions_dir}': {e}")
            return []

        paths = []
        for item in items:
            if item.name.startswith(('_', '.')):
                continue
            if item.is_file() and item.suffix == '.py':
                paths.append(item)
            elif item.is_dir() and (item / '__init__.py').exists():
                paths.append(item)
        return paths

    def load_extension(self, path: Path) -> ModuleType:
        """
        Import an extension module from a file or package directory.

        Raises:
            ModuleLoadError: If the module cannot be imported
        """
        module_name = f"{EXTENSION_PACKAGE}.{path.stem}"
        if path.is_dir():
            spec = importlib.util.spec_from_file_location(
                module_name,
                path / '__init__.py',
                submodule_search_locations=[str(path)]
            )
        else:
            spec = importlib.util.spec_from_file_location(module_name, path)

        if spec is None or spec.loader is None:
            raise ModuleLoadError(module_name, f"no loader for {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(module_name, repr(e)) from e

        logger.debug(f"Loaded extension module '{module_name}' from {path}")
        return module

    @staticmethod
    def get_service_factories(module: ModuleType) -> List[Type[ServiceBase]]:
        """
        Get the concrete service classes a module publishes.

        Raises:
            ModuleLoadError: If the module has no usable ``get_services``
        """
        get_services = getattr(module, 'get_services', None)
        if not callable(get_services):
            raise ModuleLoadError(module.__name__, "module does not define get_services()")

        try:
            candidates = list(get_services())
        except Exception as e:
            raise ModuleLoadError(module.__name__, f"get_services() failed: {e!r}") from e

        factories = []
        for candidate in candidates:
            if not (inspect.isclass(candidate) and issubclass(candidate, ServiceBase)):
                logger.warning(f"Module '{module.__name__}' published {candidate!r}, which is not a service class")
                continue
            if inspect.isabstract(candidate):
                logger.warning(f"Module '{module.__name__}' published abstract service {candidate.__name__}, skipping")
                continue
            if candidate in factories:
                continue
            factories.append(candidate)
        return factories

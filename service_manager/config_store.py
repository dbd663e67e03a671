"""
Service Configuration Store

Persists one JSON configuration document per service, named after the
service, and merges documents from disk into the live configuration.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Union

from pydantic import ValidationError

from .service_base import ServiceBase

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Loads and saves service configuration documents.

    Loading is tolerant: fields missing from the document keep their
    defaults and unknown keys are ignored. A document that cannot be read
    or validated is replaced with the current configuration.
    """

    def __init__(self, config_dir: Union[str, Path] = "configs"):
        self.config_dir = Path(config_dir)

    def config_path(self, service: ServiceBase) -> Path:
        """Get the configuration file path of a service."""
        return self.config_dir / f"{service.info.name}.json"

    def load(self, service: ServiceBase) -> bool:
        """
        Merge the on-disk document into the service's configuration.

        The configuration instance is updated in place; only fields present
        in the document are assigned.

        Args:
            service: Service whose configuration will be loaded

        Returns:
            True if a document was merged, False if a default one was written
        """
        config_path = self.config_path(service)
        config_type = type(service.config)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = config_type.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Service {service.info} does not have config, generating...")
            logger.debug(f"Config load failure for {config_path}: {e}")
            try:
                self.save(service)
            except OSError as write_error:
                logger.error(f"Failed to write default config for service {service.info}: {write_error}")
            return False

        for field_name in config_type.model_fields:
            if field_name in loaded.model_fields_set:
                setattr(service.config, field_name, getattr(loaded, field_name))

        logger.debug(f"Loaded config for service {service.info} from {config_path}")
        return True

    def save(self, service: ServiceBase) -> None:
        """
        Write the service's current configuration to disk.

        Raises:
            OSError: If the document could not be written
        """
        config_path = self.config_path(service)
        self._write_atomic(config_path, self.serialize(service))

    def save_all(self, services: Iterable[ServiceBase]) -> None:
        """
        Save the configuration of every given service.

        A failed save does not stop the remaining services from being saved.

        Raises:
            OSError: The first save failure, after every service was attempted
        """
        errors: List[OSError] = []
        for service in services:
            try:
                self.save(service)
            except OSError as e:
                logger.error(f"Failed to save config for service {service.info}: {e}")
                errors.append(e)

        if errors:
            if len(errors) > 1:
                logger.error(f"{len(errors)} service configs could not be saved")
            raise errors[0]

    @staticmethod
    def serialize(service: ServiceBase) -> str:
        """Render a service configuration as an indented JSON document."""
        return json.dumps(service.config.model_dump(mode='json'), indent=2, ensure_ascii=False) + '\n'

    def _write_atomic(self, path: Path, content: str) -> None:
        """Write a file via a temporary sibling and a rename."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix('.tmp')
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                f.write(content)
            temp_path.replace(path)
        finally:
            if temp_path.is_file():
                temp_path.unlink()

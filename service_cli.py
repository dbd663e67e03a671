"""
Service Management CLI

Command-line interface for managing bot services without starting them.
Provides functionality to list services, view their configuration, and
enable or disable them.
"""

import argparse
import sys

from dotenv import load_dotenv

import services
from service_manager import (
    ConfigStore,
    LifecycleSupervisor,
    ModuleDiscovery,
    ServiceRegistry,
    get_host_settings,
)


class ServiceManagerCLI:
    """Command-line interface for service management."""

    def __init__(self, settings=None):
        settings = settings or get_host_settings()
        self.registry = ServiceRegistry()
        self.config_store = ConfigStore(settings.config_dir)
        self.discovery = ModuleDiscovery(services, settings.extensions_dir)
        self.supervisor = LifecycleSupervisor(self.registry, self.config_store, self.discovery)

    def initialize(self):
        """Load every service and its configuration."""
        self.supervisor.load_services()

    def list_services(self):
        """List all loaded services."""
        if not len(self.registry):
            print("No services loaded.")
            return

        print("\nLoaded Services:")
        print("-" * 80)
        print(f"{'Name':<24} {'Version':<10} {'Enabled':<8} {'Author':<20} {'Commands':<8}")
        print("-" * 80)

        for service in self.registry:
            commands = len(service.chat_commands) + len(service.console_commands)
            print(f"{service.info.name:<24} {service.info.version:<10} "
                  f"{'Yes' if service.config.is_enabled else 'No':<8} "
                  f"{service.info.author:<20} {commands:<8}")

        print("-" * 80)

        for error in self.discovery.failed_modules:
            print(f"Failed module: {error.module_name} ({error.reason})")

    def show_service_info(self, name: str) -> bool:
        """Show detailed information about a service."""
        service = self.registry.find_by_name(name)
        if not service:
            print(f"Service '{name}' not found.")
            return False

        print(f"\nService Information: {service.info.name}")
        print("=" * 50)
        print(f"Version: {service.info.version}")
        print(f"Author: {service.info.author}")
        print(f"Enabled: {'Yes' if service.config.is_enabled else 'No'}")
        print(f"Config File: {self.config_store.config_path(service)}")
        print(f"Chat Commands: {', '.join(c.name for c in service.chat_commands) or 'None'}")
        print(f"Console Commands: {', '.join(c.name for c in service.console_commands) or 'None'}")
        print("\nConfiguration:")
        print(ConfigStore.serialize(service))
        return True

    def set_enabled(self, name: str, enabled: bool) -> bool:
        """Enable or disable a service and persist the change."""
        service = self.registry.find_by_name(name)
        if not service:
            print(f"Failed to {'enable' if enabled else 'disable'} service '{name}'. Service may not exist.")
            return False

        service.config.is_enabled = enabled
        self.config_store.save(service)
        print(f"Service '{service.info.name}' {'enabled' if enabled else 'disabled'}.")
        return True


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="Twitch Bot Service Manager")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('list', help='List all services')

    info_parser = subparsers.add_parser('info', help='Show service information')
    info_parser.add_argument('service', help='Service name')

    enable_parser = subparsers.add_parser('enable', help='Enable a service')
    enable_parser.add_argument('service', help='Service name')

    disable_parser = subparsers.add_parser('disable', help='Disable a service')
    disable_parser.add_argument('service', help='Service name')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    load_dotenv()
    cli = ServiceManagerCLI()
    cli.initialize()

    try:
        if args.command == 'list':
            cli.list_services()
            return 0
        elif args.command == 'info':
            return 0 if cli.show_service_info(args.service) else 1
        elif args.command == 'enable':
            return 0 if cli.set_enabled(args.service, True) else 1
        elif args.command == 'disable':
            return 0 if cli.set_enabled(args.service, False) else 1
    except OSError as e:
        print(f"Error: {e}")
        return 1
    return 1


if __name__ == '__main__':
    sys.exit(main())

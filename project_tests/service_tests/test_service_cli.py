"""
Service Management CLI Tests

This module tests the offline service management commands:
- Listing loaded services
- Showing service information
- Enabling and disabling services persistently
"""

import io
import json
import sys
import tempfile
from contextlib import redirect_stdout
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

import service_cli
from service_cli import ServiceManagerCLI
from service_manager import HostSettings


def _cli(root: Path) -> ServiceManagerCLI:
    settings = HostSettings(config_dir=root / "configs", extensions_dir=root / "extensions")
    cli = ServiceManagerCLI(settings)
    cli.initialize()
    return cli


def test_list_services():
    print("🔍 TESTING SERVICE LISTING")

    with tempfile.TemporaryDirectory() as temp_dir:
        cli = _cli(Path(temp_dir))
        output = io.StringIO()
        with redirect_stdout(output):
            cli.list_services()

        text = output.getvalue()
        assert "ChannelInfoProvider" in text
        assert "PermissionService" in text
        assert (Path(temp_dir) / "configs" / "PermissionService.json").exists()

    print("✅ Services listed")


def test_show_service_info():
    with tempfile.TemporaryDirectory() as temp_dir:
        cli = _cli(Path(temp_dir))
        output = io.StringIO()
        with redirect_stdout(output):
            assert cli.show_service_info("permissionservice") is True
            assert cli.show_service_info("Nope") is False

        text = output.getvalue()
        assert "Version: 1.1.0" in text
        assert "Chat Commands: services, permissions" in text
        assert '"role_permissions"' in text
        assert "Service 'Nope' not found." in text


def test_disable_is_persisted():
    """Disabling a service writes its config so the next load sees it."""
    print("🔍 TESTING ENABLE/DISABLE")

    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        with redirect_stdout(io.StringIO()):
            assert _cli(root).set_enabled("ChannelInfoProvider", False) is True
            assert _cli(root).set_enabled("Missing", False) is False

        stored = json.loads((root / "configs" / "ChannelInfoProvider.json").read_text())
        assert stored["is_enabled"] is False

        reloaded = _cli(root)
        provider = reloaded.registry.find_by_name("ChannelInfoProvider")
        assert provider.config.is_enabled is False
        assert [service.info.name for service in reloaded.registry.enabled_services()] == ["PermissionService"]

        with redirect_stdout(io.StringIO()):
            reloaded.set_enabled("ChannelInfoProvider", True)
        assert _cli(root).registry.find_by_name("ChannelInfoProvider").config.is_enabled is True

    print("✅ Enablement persisted")


def test_main_without_command_prints_help():
    with redirect_stdout(io.StringIO()) as output:
        assert service_cli.main([]) == 1
    assert "usage:" in output.getvalue()


def main():
    """Run all CLI tests."""
    print("🧪 SERVICE CLI TESTS")
    print("=" * 70)

    test_list_services()
    test_show_service_info()
    test_disable_is_persisted()
    test_main_without_command_prints_help()

    print("\n🎉 ALL CLI TESTS PASSED!")


if __name__ == "__main__":
    main()

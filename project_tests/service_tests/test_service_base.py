"""
Service Base Tests

This module tests the contract every service implements:
- Identity rendering and version normalization
- The start/stop wrappers logging and capturing hook failures
- No restart after a service has started or stopped
- Sealed wrapper methods
- Commands collected from the owning module
"""

import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from service_fixtures import AlphaService, BrokenStartService, EVENTS, capture_logs
from service_manager import ServiceBase, ServiceInfo, ServiceState


def test_service_info_identity():
    info = ServiceInfo(name="Greeter", version="2.1", author="Alice")
    assert info.version == "2.1.0"
    assert str(info) == '"Greeter" v2.1.0 by "Alice"'
    assert ServiceInfo(name="X", version="v3", author="A").version == "3.0.0"

    for bad_version in ("1.2.3.4", "one", ""):
        try:
            ServiceInfo(name="Greeter", version=bad_version, author="Alice")
        except ValidationError:
            continue
        raise AssertionError(f"Version {bad_version!r} should be rejected")

    try:
        info.name = "Renamed"
    except ValidationError:
        pass
    else:
        raise AssertionError("ServiceInfo should be immutable")


def test_service_name_must_be_a_plain_file_name():
    """The name becomes the config file name, so it cannot point elsewhere."""
    for bad_name in ("../escape", "nested/name", "back\\slash", "..", " padded"):
        try:
            ServiceInfo(name=bad_name, version="1.0", author="Alice")
        except ValidationError:
            continue
        raise AssertionError(f"Name {bad_name!r} should be rejected")

    assert ServiceInfo(name="Song Requests v2.x", version="1", author="A").name == "Song Requests v2.x"


def test_start_and_stop_log_bracketing_messages():
    """Each hook is bracketed by a beginning and a completed message."""
    print("🔍 TESTING LIFECYCLE LOGGING")
    EVENTS.clear()

    service = AlphaService()
    with capture_logs("service_fixtures") as logs:
        start_result = asyncio.run(service.start())
        stop_result = asyncio.run(service.stop())

    assert start_result.ok and stop_result.ok
    assert EVENTS == ["start:Alpha", "stop:Alpha"]
    assert logs.messages == [
        'Starting service "Alpha" v1.0.0 by "Tests"...',
        'Service "Alpha" v1.0.0 by "Tests" started.',
        'Stopping service "Alpha" v1.0.0 by "Tests"...',
        'Service "Alpha" v1.0.0 by "Tests" stopped.',
    ]
    assert service.state == ServiceState.STOPPED

    print("✅ Start and stop bracketed by log messages")


def test_hook_failure_is_captured():
    """A failing hook is logged and returned, never raised."""
    EVENTS.clear()
    service = BrokenStartService()

    with capture_logs("service_fixtures") as logs:
        result = asyncio.run(service.start())

    assert result.failed
    assert isinstance(result.error, RuntimeError)
    assert result.operation == "start"
    assert result.service is service
    assert service.state == ServiceState.STARTED

    errors = [record for record in logs.records if record.levelname == "ERROR"]
    assert len(errors) == 1
    assert '"BrokenStart" v1.0.0 by "Tests"' in errors[0].getMessage()
    assert "start hook exploded" in errors[0].getMessage()
    assert logs.messages[-1] == 'Service "BrokenStart" v1.0.0 by "Tests" started.'

    print("✅ Hook failure captured in result")


def test_services_cannot_restart():
    service = AlphaService()
    asyncio.run(service.start())

    try:
        asyncio.run(service.start())
    except RuntimeError:
        pass
    else:
        raise AssertionError("Second start should be refused")

    asyncio.run(service.stop())
    for operation in (service.start, service.stop):
        try:
            asyncio.run(operation())
        except RuntimeError:
            continue
        raise AssertionError("Stopped service should not run hooks again")


def test_wrappers_cannot_be_overridden():
    try:
        class SneakyService(AlphaService):
            async def start(self):
                pass
    except TypeError:
        pass
    else:
        raise AssertionError("Overriding start() should be rejected")


def test_abstract_service_cannot_be_constructed():
    class Incomplete(ServiceBase):
        async def on_start(self):
            pass

    try:
        Incomplete()
    except TypeError:
        pass
    else:
        raise AssertionError("Abstract service should not be constructible")


def test_commands_come_from_owning_module():
    service = AlphaService()
    assert [command.name for command in service.console_commands] == ["echo"]
    assert service.chat_commands == ()
    assert service.state == ServiceState.CONSTRUCTED
    assert service.config.greeting == "hello"


def main():
    """Run all service base tests."""
    print("🧪 SERVICE BASE TESTS")
    print("=" * 70)

    test_service_info_identity()
    test_service_name_must_be_a_plain_file_name()
    test_start_and_stop_log_bracketing_messages()
    test_hook_failure_is_captured()
    test_services_cannot_restart()
    test_wrappers_cannot_be_overridden()
    test_abstract_service_cannot_be_constructed()
    test_commands_come_from_owning_module()

    print("\n🎉 ALL SERVICE BASE TESTS PASSED!")


if __name__ == "__main__":
    main()

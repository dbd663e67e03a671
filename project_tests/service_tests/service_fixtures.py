"""
Service Test Fixtures

Small services, fake Twitch objects and log capture helpers shared by the
service manager tests.
"""

import logging
import sys
import types
from contextlib import contextmanager
from pathlib import Path
from typing import List

from pydantic import Field

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from service_manager import ConsoleCommandDefinition, ServiceBase, ServiceConfig, ServiceInfo

# Hook invocations of every fixture service, in call order
EVENTS: List[str] = []


class RecordingConfig(ServiceConfig):
    greeting: str = "hello"
    volume: int = 5
    tags: List[str] = Field(default_factory=list)


class DisabledConfig(ServiceConfig):
    is_enabled: bool = False


class RecordingService(ServiceBase):
    """Records its hook calls in EVENTS."""

    config_class = RecordingConfig
    service_name = "Recording"

    @property
    def info(self) -> ServiceInfo:
        return ServiceInfo(name=self.service_name, version="1.0", author="Tests")

    async def on_start(self) -> None:
        EVENTS.append(f"start:{self.service_name}")

    async def on_stop(self) -> None:
        EVENTS.append(f"stop:{self.service_name}")


class AlphaService(RecordingService):
    service_name = "Alpha"


class BrokenStartService(RecordingService):
    service_name = "BrokenStart"

    async def on_start(self) -> None:
        EVENTS.append(f"start:{self.service_name}")
        raise RuntimeError("start hook exploded")


class BrokenStopService(RecordingService):
    service_name = "BrokenStop"

    async def on_stop(self) -> None:
        EVENTS.append(f"stop:{self.service_name}")
        raise RuntimeError("stop hook exploded")


class GammaService(RecordingService):
    service_name = "Gamma"


class DisabledService(RecordingService):
    config_class = DisabledConfig
    service_name = "Disabled"


class ExplodingConstructorService(RecordingService):
    service_name = "ExplodingConstructor"

    def __init__(self):
        raise ValueError("cannot construct")


async def echo_handler(registry, args: str) -> str:
    return f"echo {args}"


def get_services():
    return [AlphaService, GammaService]


def get_console_commands():
    return [ConsoleCommandDefinition(name="echo", handler=echo_handler, description="Echo arguments")]


def make_module(name: str, *service_classes) -> types.ModuleType:
    """Build a throwaway service module publishing the given classes."""
    module = types.ModuleType(name)
    module.get_services = lambda: list(service_classes)
    return module


class ListHandler(logging.Handler):
    """Collects formatted log messages."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    @property
    def messages(self) -> List[str]:
        return [record.getMessage() for record in self.records]


@contextmanager
def capture_logs(*logger_names: str, level: int = logging.INFO):
    """Capture records of the named loggers at the given level."""
    handler = ListHandler()
    loggers = [logging.getLogger(name) for name in logger_names]
    previous = [logger.level for logger in loggers]
    for logger in loggers:
        logger.addHandler(handler)
        logger.setLevel(level)
    try:
        yield handler
    finally:
        for logger, old_level in zip(loggers, previous):
            logger.removeHandler(handler)
            logger.setLevel(old_level)


class FakeChatUser:
    def __init__(self, name: str, mod: bool = False, vip: bool = False,
                 subscriber: bool = False, broadcaster: bool = False):
        self.name = name
        self.mod = mod
        self.vip = vip
        self.subscriber = subscriber
        self.badges = {'broadcaster': '1'} if broadcaster else {}


class FakeChatCommand:
    """Stands in for twitchAPI's ChatCommand; records replies."""

    def __init__(self, user: FakeChatUser, parameter: str = ""):
        self.user = user
        self.parameter = parameter
        self.replies: List[str] = []

    async def reply(self, text: str) -> None:
        self.replies.append(text)


class FakeTwitchUser:
    def __init__(self, user_id: str):
        self.id = user_id


class FakeTwitch:
    """Stands in for twitchAPI's Twitch; resolves logins from a mapping."""

    def __init__(self, users: dict):
        self.users = users

    async def get_users(self, logins=None):
        for login in logins or []:
            if login in self.users:
                yield FakeTwitchUser(self.users[login])

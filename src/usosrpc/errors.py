from __future__ import annotations


class UsosRpcError(Exception):
    """Base class for every error raised by usosrpc."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(UsosRpcError):
    pass


class FetchError(UsosRpcError):
    pass


class CalendarNotLoadedError(UsosRpcError):
    def __init__(self) -> None:
        super().__init__("Calendar has not been loaded yet")


class CalendarError(UsosRpcError):
    """The feed could not be turned into a Calendar."""


class FramingError(CalendarError):
    pass


class RecordError(CalendarError):
    """A single VEVENT record is unusable; the scan skips it."""


class MissingPropertyError(RecordError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Missing property: {name}")
        self.name = name


class TimestampError(RecordError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Could not parse event timestamp: {value!r}")
        self.value = value


class NoEventsError(CalendarError):
    def __init__(self, attempted: int) -> None:
        super().__init__(f"Could not parse events ({attempted} records, none usable)")
        self.attempted = attempted


class MetadataError(CalendarError):
    pass


class TimeZoneError(MetadataError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown time zone: {name!r}")
        self.name = name

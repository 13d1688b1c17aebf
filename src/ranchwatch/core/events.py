"""Event categories, display glyphs, and activity mappings."""

from enum import StrEnum

from ranchwatch.core.models import CattleEventType, LogLevel

ERROR_GLYPH = "\U0001f6a8"  # rotating light
WARN_GLYPH = "⚠️"
DEFAULT_GLYPH = "\U0001f4dd"  # memo

_EVENT_GLYPHS: dict[str, str] = {
    CattleEventType.CATTLE_CREATED: "\U0001f404",  # cow
    CattleEventType.VACCINATION_ADMINISTERED: "\U0001f489",  # syringe
    CattleEventType.ILLNESS_DIAGNOSED: "\U0001fa7a",  # stethoscope
    CattleEventType.BIRTH_RECORDED: "\U0001f37c",  # baby bottle
    CattleEventType.CATTLE_MOVED: "\U0001f4cd",  # pin
    CattleEventType.MILK_PRODUCTION_RECORDED: "\U0001f95b",  # glass of milk
    CattleEventType.LOGIN_ATTEMPT: "\U0001f510",  # lock with key
    CattleEventType.DATA_EXPORTED: "\U0001f4ca",  # bar chart
    CattleEventType.BACKUP_CREATED: "\U0001f4be",  # floppy disk
}


def event_glyph(level: LogLevel, event_type: str) -> str:
    """Return the display glyph for a record.

    ERROR and WARN records always get the alert glyphs. Otherwise the event
    type picks the glyph, and anything without one (including free-form
    event types) gets the default memo glyph.
    """
    if level is LogLevel.ERROR:
        return ERROR_GLYPH
    if level is LogLevel.WARN:
        return WARN_GLYPH
    return _EVENT_GLYPHS.get(event_type, DEFAULT_GLYPH)


class VeterinaryActivity(StrEnum):
    """Kind of veterinary work, each logged under its own event type."""

    DIAGNOSIS = "diagnosis"
    TREATMENT = "treatment"
    VACCINATION = "vaccination"
    CHECKUP = "checkup"

    @property
    def event_type(self) -> CattleEventType:
        return _VETERINARY_EVENTS[self]


_VETERINARY_EVENTS = {
    VeterinaryActivity.DIAGNOSIS: CattleEventType.ILLNESS_DIAGNOSED,
    VeterinaryActivity.TREATMENT: CattleEventType.TREATMENT_STARTED,
    VeterinaryActivity.VACCINATION: CattleEventType.VACCINATION_ADMINISTERED,
    VeterinaryActivity.CHECKUP: CattleEventType.HEALTH_CHECKUP,
}


class AuthEvent(StrEnum):
    """Authentication events. Failed logins are logged at WARN."""

    LOGIN = "login"
    LOGOUT = "logout"
    FAILED_LOGIN = "failed_login"
    TOKEN_EXPIRED = "token_expired"

    @property
    def event_type(self) -> CattleEventType:
        if self is AuthEvent.LOGOUT:
            return CattleEventType.LOGOUT
        return CattleEventType.LOGIN_ATTEMPT

    @property
    def level(self) -> LogLevel:
        if self is AuthEvent.FAILED_LOGIN:
            return LogLevel.WARN
        return LogLevel.INFO


class AuditOperation(StrEnum):
    """CRUD operation named in an audit trail record."""

    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"

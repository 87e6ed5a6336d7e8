"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass, field

from crumb.http.cookies import CookieOptions


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(
            debug=True,
            cookie_defaults=CookieOptions(path="/", httponly=True, samesite="lax"),
        )
    """

    debug: bool = False

    # Base option set every cookie set/delete extends. A duration string
    # in ``expires`` must parse, or App() raises ConfigurationError.
    cookie_defaults: CookieOptions = field(default_factory=lambda: CookieOptions(path="/"))

    # Level for the process-wide "crumb" logger; None leaves it to the host app
    log_level: str | None = None

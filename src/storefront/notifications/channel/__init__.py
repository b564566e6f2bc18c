"""Channel adapter registry.

Holds the email adapter as a singleton. The fake adapter is used unless
``SMTP_HOST`` is configured.
"""

from storefront import config
from storefront.notifications.channel.email_port import EmailPort

_email_adapter: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_adapter
    if _email_adapter is None:
        if config.SMTP_HOST:
            from storefront.notifications.channel.smtp_email import SMTPEmailAdapter

            _email_adapter = SMTPEmailAdapter()
        else:
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _email_adapter = FakeEmailAdapter()
    return _email_adapter


def set_email_channel(adapter: EmailPort) -> None:
    global _email_adapter
    _email_adapter = adapter


def reset_channels() -> None:
    """Reset channel singletons (useful for testing)."""
    global _email_adapter
    _email_adapter = None

"""Email sender registry, used for customer delivery emails."""

import os

from studio.mailer.port import EmailPort

_email_instance: EmailPort | None = None


def get_email_sender() -> EmailPort:
    global _email_instance
    if _email_instance is None:
        adapter = os.environ.get("EMAIL_ADAPTER", "fake")
        if adapter == "fake":
            from studio.mailer.fake_adapter import FakeEmailAdapter

            _email_instance = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")
    return _email_instance


def set_email_sender(sender: EmailPort) -> None:
    global _email_instance
    _email_instance = sender


def reset_email_sender() -> None:
    global _email_instance
    _email_instance = None

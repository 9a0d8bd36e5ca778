"""errors.py

Exceptions raised by the service layer.

* ``ExchangeAPIError`` and its subclasses come out of the REST wrapper.
* ``FormValidationError`` is raised by form-level checks **before** any
  request is sent, so it deliberately does not inherit from the API base.
"""

from __future__ import annotations


class ExchangeAPIError(Exception):
    """Base exception for everything raised while talking to the exchange API."""


class TransportError(ExchangeAPIError):
    """Connection failure, timeout or an undecodable response body."""


class BusinessRuleError(ExchangeAPIError):
    """The server answered with a non-2xx status (insufficient balance, KYC, ...)."""

    def __init__(self, status_code: int, messages: list[str]):
        self.status_code = status_code
        self.messages = messages or [f"API request failed: {status_code}"]
        super().__init__("; ".join(self.messages))


class PayloadShapeError(ExchangeAPIError):
    """The response decoded fine but its shape is not one we know how to read."""


class FormValidationError(ValueError):
    """A form value broke a client-side rule (amount below minimum, ...)."""

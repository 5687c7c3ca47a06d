"""Exception hierarchy raised by oxr_bank."""

from __future__ import annotations

from typing import Mapping


class OXRBankError(Exception):
    """Base class for every error raised by the package."""


class NoCredentialError(OXRBankError):
    """No Open Exchange Rates ``app_id`` has been configured."""

    def __init__(self, message: str = "An app_id is required to query Open Exchange Rates") -> None:
        super().__init__(message)


class InvalidCacheError(OXRBankError):
    """The cache destination is missing, unrecognised or unusable."""


class NoRateError(OXRBankError):
    """No rate could be found or derived for a currency pair."""

    def __init__(self, from_currency: str, to_currency: str, rate_type: str = "mid") -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.rate_type = rate_type
        label = "" if rate_type == "mid" else f" ({rate_type})"
        super().__init__(f"No conversion rate known for {from_currency} -> {to_currency}{label}")


class ZeroRateError(NoRateError):
    """A stored zero rate would have to be inverted to answer the lookup."""

    def __init__(self, from_currency: str, to_currency: str, rate_type: str = "mid") -> None:
        super().__init__(from_currency, to_currency, rate_type)
        self.args = (
            f"Cannot derive {from_currency} -> {to_currency}: the stored rate is zero",
        )


class FetchError(OXRBankError):
    """The network request failed before a usable body was received."""


class ApiError(OXRBankError):
    """Open Exchange Rates answered with an error payload."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.description = description


class AccessRestrictedError(ApiError):
    """The account is not allowed to make this request."""


class CredentialInactiveError(ApiError):
    """The ``app_id`` exists but has been deactivated."""


class InvalidCredentialError(ApiError):
    """The ``app_id`` is not recognised by the API."""


class InvalidBaseError(ApiError):
    """The requested base currency is not supported."""


class DocumentNotFoundError(ApiError):
    """The requested resource (e.g. a historical date) does not exist."""


class MalformedDocumentError(OXRBankError):
    """A response body does not carry the expected rates document schema."""


class _MissingCredentialApiError(NoCredentialError, ApiError):
    """Server-side confirmation that the request carried no ``app_id``."""

    def __init__(self, message: str, **details) -> None:
        ApiError.__init__(self, message, **details)


API_ERROR_MAP: Mapping[str, type[ApiError]] = {
    "access_restricted": AccessRestrictedError,
    "not_allowed": AccessRestrictedError,
    "app_id_inactive": CredentialInactiveError,
    "invalid_app_id": InvalidCredentialError,
    "missing_app_id": _MissingCredentialApiError,
    "invalid_base": InvalidBaseError,
    "not_found": DocumentNotFoundError,
}


def api_error_for(payload: Mapping[str, object]) -> ApiError:
    """Build the typed error matching an API error payload."""

    code = str(payload.get("message") or "")
    description = payload.get("description")
    status = payload.get("status")
    error_cls = API_ERROR_MAP.get(code, ApiError)
    message = str(description) if description else f"Open Exchange Rates error: {code or 'unknown'}"
    return error_cls(
        message,
        status=status if isinstance(status, int) else None,
        code=code or None,
        description=str(description) if description else None,
    )


__all__ = [
    "API_ERROR_MAP",
    "AccessRestrictedError",
    "ApiError",
    "CredentialInactiveError",
    "DocumentNotFoundError",
    "FetchError",
    "InvalidBaseError",
    "InvalidCacheError",
    "InvalidCredentialError",
    "MalformedDocumentError",
    "NoCredentialError",
    "NoRateError",
    "OXRBankError",
    "ZeroRateError",
    "api_error_for",
]

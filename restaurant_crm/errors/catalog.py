"""
Restaurant CRM Backend - Error Catalog
=======================================

What:  Fixed table mapping a closed set of named failure conditions to the
       (HTTP status, message) pair shown to clients.
How:   `ErrorCode` is a closed enum; `ERROR_CATALOG` is a read-only mapping
       built once at import. The import fails if any code lacks an entry.
Who:   Read by ErrorResponder.build_from_catalog and the constraint classifier.
"""

import enum
from types import MappingProxyType
from typing import Mapping, NamedTuple


class ErrorCode(str, enum.Enum):
    """Failure conditions that have a fixed, client-facing message."""

    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    DUPLICATE_PHONE = "DUPLICATE_PHONE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class CatalogEntry(NamedTuple):
    status: int
    message: str


ERROR_CATALOG: Mapping[ErrorCode, CatalogEntry] = MappingProxyType({
    ErrorCode.CUSTOMER_NOT_FOUND: CatalogEntry(404, "Customer not found"),
    ErrorCode.DUPLICATE_EMAIL: CatalogEntry(409, "Email already exists"),
    ErrorCode.DUPLICATE_PHONE: CatalogEntry(409, "Phone number already exists"),
    ErrorCode.INTERNAL_SERVER_ERROR: CatalogEntry(500, "An internal server error occurred"),
})


def lookup(code: ErrorCode) -> CatalogEntry:
    """Returns the (status, message) pair for `code`."""
    return ERROR_CATALOG[code]


def _check_catalog_complete() -> None:
    missing = set(ErrorCode) - set(ERROR_CATALOG)
    extra = set(ERROR_CATALOG) - set(ErrorCode)
    if missing or extra:
        raise RuntimeError(
            f"Error catalog out of sync with ErrorCode: missing={sorted(missing)} "
            f"extra={sorted(extra)}"
        )


_check_catalog_complete()

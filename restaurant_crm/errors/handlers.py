"""
Restaurant CRM Backend - Error Hook
====================================

What:  The single boundary where raised failures become HTTP responses.
How:   ErrorHook.handle() classifies the failure (classifier.classify) and
       calls the one responder registered for that FailureKind. The
       dispatch table is checked against FailureKind at construction, so a
       new kind without a responder fails at startup, not on the first
       request that hits it.
Who:   register_exception_handlers() installs the hook on the FastAPI app
       for every classified exception type and for Exception.

Kind → response:
    VALIDATION            400 "Validation failed" + validationErrors
    NOT_FOUND             catalog CUSTOMER_NOT_FOUND (404)
    CONSTRAINT_VIOLATION  catalog DUPLICATE_EMAIL / DUPLICATE_PHONE (409),
                          else 409 with the storage message
    INVALID_ARGUMENT      400 with the failure's message
    INVALID_STATE         409 with the failure's message
    HTTP_ERROR            the exception's own status, detail and headers
    UNCLASSIFIED          catalog INTERNAL_SERVER_ERROR (500), real message
                          only in the server log

Note on Exception:
    Starlette routes the `Exception` handler through ServerErrorMiddleware,
    which sends our 500 body and then re-raises so the server logs the
    traceback. That middleware sits outside RequestIDMiddleware, so the
    hook sets X-Request-ID itself. Every other kind is answered by
    ExceptionMiddleware and goes no further.
"""

import logging
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from restaurant_crm.errors.catalog import ErrorCode
from restaurant_crm.errors.classifier import (
    CLASSIFIED_EXCEPTION_TYPES,
    ConstraintClassifier,
    FailureKind,
    MessageSniffingConstraintClassifier,
    classify,
    collect_violations,
)
from restaurant_crm.errors.responder import ErrorResponder, error_responder, failure_message
from restaurant_crm.middleware.request_id import request_id_var
from restaurant_crm.schemas.error import ErrorDetails

logger = logging.getLogger(__name__)

Responder = Callable[[BaseException, str], ErrorDetails]


class ErrorHook:
    """
    Classifies a failure and builds its ErrorDetails.

    Args:
        responder: Builds the ErrorDetails values.
        constraint_classifier: Maps storage constraint messages onto catalog
            entries; defaults to MessageSniffingConstraintClassifier.
    """

    def __init__(
        self,
        responder: ErrorResponder = error_responder,
        constraint_classifier: Optional[ConstraintClassifier] = None,
    ):
        self._responder = responder
        self._constraints = constraint_classifier or MessageSniffingConstraintClassifier()
        self._dispatch: Mapping[FailureKind, Responder] = MappingProxyType({
            FailureKind.VALIDATION: self._validation,
            FailureKind.NOT_FOUND: self._not_found,
            FailureKind.CONSTRAINT_VIOLATION: self._constraint_violation,
            FailureKind.INVALID_ARGUMENT: self._invalid_argument,
            FailureKind.INVALID_STATE: self._invalid_state,
            FailureKind.HTTP_ERROR: self._http_error,
            FailureKind.UNCLASSIFIED: self._unclassified,
        })
        missing = set(FailureKind) - set(self._dispatch)
        if missing:
            raise RuntimeError(f"No responder for failure kinds: {sorted(missing)}")

    # ── Responders, one per FailureKind ───────────────────────────────────

    def _validation(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_validation(exc, path, collect_violations(exc))

    def _not_found(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_from_catalog(ErrorCode.CUSTOMER_NOT_FOUND, exc, path)

    def _constraint_violation(self, exc: BaseException, path: str) -> ErrorDetails:
        code = self._constraints.classify(failure_message(exc))
        if code is not None:
            return self._responder.build_from_catalog(code, exc, path)
        return self._responder.build_from_status(409, exc, path)

    def _invalid_argument(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_from_status(400, exc, path)

    def _invalid_state(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_from_status(409, exc, path)

    def _http_error(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_from_status(exc.status_code, exc, path)

    def _unclassified(self, exc: BaseException, path: str) -> ErrorDetails:
        return self._responder.build_from_catalog(ErrorCode.INTERNAL_SERVER_ERROR, exc, path)

    # ── Entry points ──────────────────────────────────────────────────────

    def handle(self, exc: BaseException, path: str) -> ErrorDetails:
        """Pure classification + build; no logging, no response object."""
        return self._dispatch[classify(exc)](exc, path)

    async def __call__(self, request: Request, exc: Exception) -> JSONResponse:
        details = self.handle(exc, request.url.path)
        rid = getattr(request.state, "request_id", None) or request_id_var.get("")

        if details.status >= 500:
            logger.error(
                "[%s] Unhandled %s on %s: %s",
                rid,
                type(exc).__name__,
                details.path,
                str(exc),
                exc_info=exc,
            )
        else:
            logger.warning(
                "[%s] %d %s on %s: %s",
                rid,
                details.status,
                type(exc).__name__,
                details.path,
                details.message,
            )

        headers: Dict[str, str] = {}
        if isinstance(exc, StarletteHTTPException) and exc.headers:
            headers.update(exc.headers)
        # 500s are sent by ServerErrorMiddleware, outside RequestIDMiddleware
        if rid:
            headers["X-Request-ID"] = rid
        return self._responder.render(details, headers or None)


def register_exception_handlers(app: FastAPI, hook: Optional[ErrorHook] = None) -> ErrorHook:
    """
    Route every unhandled failure on `app` through one ErrorHook.

    Handlers are looked up by the exception's MRO, so registering the
    classified types plus Exception covers everything; the hook itself
    decides the response, in rule order.
    """
    hook = hook or ErrorHook()
    for exc_type in CLASSIFIED_EXCEPTION_TYPES:
        app.add_exception_handler(exc_type, hook)
    app.add_exception_handler(Exception, hook)
    return hook

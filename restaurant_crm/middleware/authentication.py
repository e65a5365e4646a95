"""
Restaurant CRM Backend - Access Policy Middleware
==================================================

What:  Gates every request on the configured AccessPolicy before it
       reaches a route.
How:   Paths the policy permits pass straight through. For every other
       path the HTTP Basic credentials are parsed with FastAPI's HTTPBasic
       and checked against the CredentialStore; on success the username is
       stored on request.state.principal.
Who:   Registered in main.create_app(), inside CORS so preflight requests
       and 401 bodies both get CORS headers.

Rejections:
    401 Unauthorized with `WWW-Authenticate: Basic realm="..."` and the
    standard ErrorDetails body (exceptionType "AuthenticationError").
    Unknown paths are rejected too when unauthenticated; routing (and its
    404) only happens after the gate.
"""

import logging

from fastapi import HTTPException
from fastapi.security import HTTPBasic
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from restaurant_crm.errors.responder import error_responder
from restaurant_crm.exceptions import AuthenticationError
from restaurant_crm.middleware.request_id import request_id_var
from restaurant_crm.security import AccessPolicy, CredentialStore

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS_MESSAGE = "Full authentication is required to access this resource"
BAD_CREDENTIALS_MESSAGE = "Invalid authentication credentials"


class AccessPolicyMiddleware(BaseHTTPMiddleware):
    """
    Enforces one AccessPolicy with one CredentialStore.

    Both are built once in create_app() and only read here.
    """

    def __init__(
        self,
        app: ASGIApp,
        policy: AccessPolicy,
        credentials: CredentialStore,
        realm: str,
    ):
        super().__init__(app)
        self.policy = policy
        self.credentials = credentials
        self.realm = realm
        self._basic = HTTPBasic(auto_error=False, realm=realm)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if self.policy.permits_anonymous(path):
            return await call_next(request)

        try:
            credentials = await self._basic(request)
        except HTTPException:
            # Malformed header (bad base64, no ':' separator)
            return self._unauthorized(request, BAD_CREDENTIALS_MESSAGE)

        if credentials is None:
            return self._unauthorized(request, MISSING_CREDENTIALS_MESSAGE)

        if not await self.credentials.verify_async(credentials.username, credentials.password):
            logger.warning(
                "[%s] Rejected credentials for user '%s' on %s",
                request_id_var.get(""),
                credentials.username,
                path,
            )
            return self._unauthorized(request, BAD_CREDENTIALS_MESSAGE)

        request.state.principal = credentials.username
        return await call_next(request)

    def _unauthorized(self, request: Request, message: str) -> Response:
        details = error_responder.build_from_status(
            401, AuthenticationError(message), request.url.path
        )
        return error_responder.render(
            details, headers={"WWW-Authenticate": f'Basic realm="{self.realm}"'}
        )

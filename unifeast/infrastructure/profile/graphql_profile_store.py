"""GraphQL profile store (primary).

Talks to the hosted GraphQL data API that owns the camelCase profile model.
Records are owner-restricted by the remote service, so every request carries
the signed-in user's access token.

Conditional writes are enforced server-side: create fails when the key
exists and update fails when it does not, both with a
ConditionalCheckFailedException error.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
)
from unifeast.domain.profile.core.ports.profile_store import IProfileStore
from unifeast.domain.profile.normalization.schema_normalizer import PRIMARY_SHAPE

logger = structlog.get_logger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"

PROFILE_FIELDS = "\n".join(
    wire for wire in PRIMARY_SHAPE.wire_names.values() if wire is not None
)

GET_PROFILE = f"""
query GetProfile($id: ID!) {{
  getProfile(id: $id) {{
{PROFILE_FIELDS}
  }}
}}
"""

CREATE_PROFILE = f"""
mutation CreateProfile($input: CreateProfileInput!) {{
  createProfile(input: $input) {{
{PROFILE_FIELDS}
  }}
}}
"""

UPDATE_PROFILE = f"""
mutation UpdateProfile($input: UpdateProfileInput!) {{
  updateProfile(input: $input) {{
{PROFILE_FIELDS}
  }}
}}
"""


class _GraphQLErrors(Exception):
    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        super().__init__("; ".join(str(err.get("message", err)) for err in errors))

    @property
    def conditional_check_failed(self) -> bool:
        return any(
            CONDITIONAL_CHECK_FAILED in str(err.get("errorType", ""))
            or CONDITIONAL_CHECK_FAILED in str(err.get("message", ""))
            for err in self.errors
        )


class GraphQLProfileStore(IProfileStore):
    """Primary store adapter over httpx.

    Example:
        >>> async with GraphQLProfileStore(endpoint, access_token=token) as store:
        ...     record = await store.get("user-1")
    """

    key_field = "id"
    TIMEOUT_S = 10.0

    def __init__(
        self,
        endpoint: str,
        access_token: Optional[str] = None,
        timeout: float = TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
        name: str = "primary",
    ) -> None:
        """Initialize GraphQL store.

        Args:
            endpoint: GraphQL URL
            access_token: Signed-in user's token (owner authorization)
            timeout: Request timeout in seconds
            client: Pre-built client (tests inject a MockTransport); when
                given, the caller keeps ownership and close() leaves it open
            name: Store name used in logs and errors
        """
        self.name = name
        self._endpoint = endpoint
        self._access_token = access_token
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "GraphQLProfileStore":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    # ============================================================
    # IProfileStore
    # ============================================================

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            data = await self._execute(GET_PROFILE, {"id": user_id})
        except _GraphQLErrors as e:
            raise self._backend_error(f"GraphQL errors: {e}", user_id=user_id) from e
        record = data.get("getProfile")
        if record is None:
            logger.debug("Profile not in store", store=self.name, user_id=user_id)
            return None
        return self._record(record, "getProfile")

    async def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        user_id = record.get(self.key_field)
        if not user_id:
            raise ValueError(f"Record has no '{self.key_field}'")
        try:
            data = await self._execute(CREATE_PROFILE, {"input": record})
        except _GraphQLErrors as e:
            if e.conditional_check_failed:
                raise ProfileAlreadyExistsError(user_id, self.name) from e
            raise self._backend_error(f"GraphQL errors: {e}", user_id=user_id) from e
        return self._record(data.get("createProfile"), "createProfile")

    async def update(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: v for k, v in fields.items() if k != self.key_field}
        payload[self.key_field] = user_id
        try:
            data = await self._execute(UPDATE_PROFILE, {"input": payload})
        except _GraphQLErrors as e:
            if e.conditional_check_failed:
                raise ProfileNotFoundError(user_id, self.name) from e
            raise self._backend_error(f"GraphQL errors: {e}", user_id=user_id) from e
        return self._record(data.get("updateProfile"), "updateProfile")

    # ============================================================
    # Transport
    # ============================================================

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _execute(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        """Post a GraphQL operation.

        Returns:
            The "data" object of the response

        Raises:
            _GraphQLErrors: If the response carries GraphQL errors
            BackendError: On transport, HTTP status or decoding failures
        """
        payload = {"query": query, "variables": variables}
        try:
            response = await self._client.post(
                self._endpoint, json=payload, headers=self._headers()
            )
        except httpx.TimeoutException as e:
            raise self._backend_error("request timed out") from e
        except httpx.HTTPError as e:
            raise self._backend_error(f"transport error: {type(e).__name__}") from e

        status = response.status_code
        if status in (401, 403):
            raise self._backend_error(f"not authorized (HTTP {status})")
        if status == 429:
            raise self._backend_error("throttled (HTTP 429)")
        if status >= 500:
            raise self._backend_error(f"server error (HTTP {status})")
        if status >= 400 and not self._has_json_body(response):
            raise self._backend_error(f"request rejected (HTTP {status})")

        try:
            body = response.json()
        except ValueError as e:
            raise self._backend_error("response is not valid JSON") from e

        if not isinstance(body, dict):
            raise self._backend_error("response is not a JSON object")

        if body.get("errors"):
            raise _GraphQLErrors(list(body["errors"]))

        data = body.get("data")
        if not isinstance(data, dict):
            raise self._backend_error("response has no data")
        return data

    @staticmethod
    def _has_json_body(response: httpx.Response) -> bool:
        return "json" in response.headers.get("content-type", "")

    def _record(self, value: Any, operation: str) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise self._backend_error(f"{operation} returned no record")
        return value

    def _backend_error(self, message: str, **context: Any) -> BackendError:
        logger.error("Primary store request failed", store=self.name, reason=message, **context)
        return BackendError(self.name, message)

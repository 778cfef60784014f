"""Unit tests for GraphQLProfileStore (httpx.MockTransport)."""

import json
from typing import Callable, List

import httpx
import pytest

from unifeast.domain.profile.core.exceptions.profile_errors import (
    BackendError,
    ProfileAlreadyExistsError,
    ProfileNotFoundError,
)
from unifeast.infrastructure.profile.graphql_profile_store import GraphQLProfileStore

ENDPOINT = "https://api.example.test/graphql"


def make_store(handler: Callable[[httpx.Request], httpx.Response]) -> GraphQLProfileStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GraphQLProfileStore(ENDPOINT, access_token="token-123", client=client)


def graphql_response(data=None, errors=None, status_code=200) -> httpx.Response:
    body = {"data": data}
    if errors is not None:
        body["errors"] = errors
    return httpx.Response(status_code, json=body)


class TestGraphQLProfileStoreGet:
    """Test getProfile."""

    @pytest.mark.asyncio
    async def test_get_returns_record(self, primary_record):
        """Test a found record is returned as-is with the request authorized."""
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return graphql_response({"getProfile": primary_record})

        store = make_store(handler)
        record = await store.get("user-1")

        assert record == primary_record
        payload = json.loads(requests[0].content)
        assert "getProfile" in payload["query"]
        assert payload["variables"] == {"id": "user-1"}
        assert requests[0].headers["Authorization"] == "Bearer token-123"

    @pytest.mark.asyncio
    async def test_query_selects_every_primary_field(self, primary_record):
        """Test the selection set covers the full primary shape."""
        queries: List[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            queries.append(json.loads(request.content)["query"])
            return graphql_response({"getProfile": None})

        await make_store(handler).get("user-1")

        for field in primary_record:
            assert field in queries[0]

    @pytest.mark.asyncio
    async def test_null_result_is_absence(self):
        """Test a null getProfile means no record."""
        store = make_store(lambda request: graphql_response({"getProfile": None}))

        assert await store.get("user-1") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 403, 429, 500, 503])
    async def test_http_failures_are_backend_errors(self, status_code):
        """Test auth, throttling and server failures are never absence."""
        store = make_store(lambda request: httpx.Response(status_code, text="nope"))

        with pytest.raises(BackendError) as exc_info:
            await store.get("user-1")

        assert exc_info.value.store == "primary"
        assert str(status_code) in exc_info.value.message

    @pytest.mark.asyncio
    async def test_timeout_is_backend_error(self):
        """Test client timeouts surface as BackendError with the cause chained."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(BackendError, match="timed out") as exc_info:
            await make_store(handler).get("user-1")

        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_transport_error_is_backend_error(self):
        """Test connection failures surface as BackendError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BackendError, match="ConnectError"):
            await make_store(handler).get("user-1")

    @pytest.mark.asyncio
    async def test_graphql_errors_are_backend_errors(self):
        """Test GraphQL errors on reads are failures, not absence."""
        store = make_store(
            lambda request: graphql_response(
                None, errors=[{"errorType": "Unauthorized", "message": "Not Authorized"}]
            )
        )

        with pytest.raises(BackendError, match="Not Authorized"):
            await store.get("user-1")

    @pytest.mark.asyncio
    async def test_invalid_json_is_backend_error(self):
        """Test malformed responses are failures."""
        store = make_store(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(BackendError, match="JSON"):
            await store.get("user-1")


class TestGraphQLProfileStoreWrites:
    """Test createProfile / updateProfile."""

    @pytest.mark.asyncio
    async def test_create_sends_input(self, primary_record):
        """Test create posts the record as mutation input."""
        payloads: List[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            payloads.append(json.loads(request.content))
            return graphql_response({"createProfile": primary_record})

        created = await make_store(handler).create(primary_record)

        assert created == primary_record
        assert "createProfile" in payloads[0]["query"]
        assert payloads[0]["variables"] == {"input": primary_record}

    @pytest.mark.asyncio
    async def test_create_conflict_is_already_exists(self, primary_record):
        """Test a failed condition on create means the record exists."""
        store = make_store(
            lambda request: graphql_response(
                None,
                errors=[
                    {
                        "errorType": "DynamoDB:ConditionalCheckFailedException",
                        "message": "The conditional request failed",
                    }
                ],
            )
        )

        with pytest.raises(ProfileAlreadyExistsError):
            await store.create(primary_record)

    @pytest.mark.asyncio
    async def test_update_sends_key_and_fields(self, primary_record):
        """Test update posts only the given fields plus the key."""
        payloads: List[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            payloads.append(json.loads(request.content))
            return graphql_response({"updateProfile": {**primary_record, "milkAllergy": True}})

        updated = await make_store(handler).update("user-1", {"milkAllergy": True})

        assert updated["milkAllergy"] is True
        assert payloads[0]["variables"] == {"input": {"milkAllergy": True, "id": "user-1"}}

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self):
        """Test a failed existence condition on update means absence."""
        store = make_store(
            lambda request: graphql_response(
                None,
                errors=[{"message": "ConditionalCheckFailedException: item does not exist"}],
            )
        )

        with pytest.raises(ProfileNotFoundError):
            await store.update("user-1", {"milkAllergy": True})

    @pytest.mark.asyncio
    async def test_mutation_without_record_is_backend_error(self):
        """Test a mutation returning null is a malformed response."""
        store = make_store(lambda request: graphql_response({"updateProfile": None}))

        with pytest.raises(BackendError):
            await store.update("user-1", {"milkAllergy": True})


class TestGraphQLProfileStoreLifecycle:
    """Test client ownership."""

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self):
        """Test close() leaves a caller-owned client alone."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: graphql_response({}))
        )
        store = GraphQLProfileStore(ENDPOINT, client=client)

        await store.close()

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed_on_exit(self):
        """Test the context manager closes the store's own client."""
        async with GraphQLProfileStore(ENDPOINT) as store:
            pass

        assert store._client.is_closed is True

    @pytest.mark.asyncio
    async def test_no_token_no_authorization_header(self):
        """Test requests without a session token carry no Authorization."""
        headers: List[httpx.Headers] = []

        def handler(request: httpx.Request) -> httpx.Response:
            headers.append(request.headers)
            return graphql_response({"getProfile": None})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        await GraphQLProfileStore(ENDPOINT, client=client).get("user-1")

        assert "Authorization" not in headers[0]

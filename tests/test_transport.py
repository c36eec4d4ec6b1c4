import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from book_catalog.client.transport import GraphQLTransport
from book_catalog.config import settings
from book_catalog.tools.errors import GraphQLRequestError, UnexpectedResponseError


def _execute(payload):
    transport = GraphQLTransport(endpoint="http://localhost:4000/graphql")
    with patch.object(transport, "_make_request", AsyncMock(return_value=payload)) as request:
        result = asyncio.run(transport.execute("{ books { total } }", {"limit": 10}))
    return result, request


def test_execute_posts_query_and_returns_data():
    data, request = _execute({"data": {"books": {"total": 3}}})

    assert data == {"books": {"total": 3}}
    method, endpoint = request.await_args.args
    assert (method, endpoint) == ("POST", "")
    assert request.await_args.kwargs["data"] == {"query": "{ books { total } }", "variables": {"limit": 10}}


def test_execute_raises_on_graphql_errors():
    with pytest.raises(GraphQLRequestError) as exc:
        _execute({"data": None, "errors": [{"message": "Delete failed: 500"}, {"message": "other"}]})

    assert str(exc.value) == "Delete failed: 500; other"


def test_execute_raises_without_data():
    with pytest.raises(UnexpectedResponseError):
        _execute({"something": "else"})


def test_default_endpoint_follows_environment():
    transport = GraphQLTransport()

    assert transport.base_url == settings.graphql_endpoint

"""Tests for the aiohttp gateway client against a local test server."""
from __future__ import annotations

from datetime import timedelta

import pytest
from aiohttp import web
from aiohttp import test_utils

from conftest import err_value, ok_value
from storefront.api import ApiErrorKind, HttpApi, decode_body

COOKIE = "session"


async def _login(request: web.Request) -> web.Response:
    body = await request.json()
    if body.get("password") != "hunter22":
        return web.Response(status=401, text="invalid credentials")
    resp = web.json_response({"message": "logged in"})
    resp.set_cookie(COOKIE, "u1")
    return resp


async def _profile(request: web.Request) -> web.Response:
    if request.cookies.get(COOKIE) != "u1":
        return web.Response(status=401, text="not authorized")
    return web.json_response({"id": 1, "email": "ann@example.com"})


async def _cart(request: web.Request) -> web.Response:
    return web.Response(status=500, text="something went wrong")


async def _remove(request: web.Request) -> web.Response:
    body = await request.json()
    return web.json_response({"success": True, "message": "Item removed", "echo": body["product_id"]})


async def _search(request: web.Request) -> web.Response:
    return web.Response(text="null" if request.query.get("q") == "none" else "[]")


async def _register(request: web.Request) -> web.Response:
    return web.Response(status=201, text="user created!")


@pytest.fixture
def gateway_app() -> web.Application:
    app = web.Application()
    app.router.add_post("/login", _login)
    app.router.add_post("/register", _register)
    app.router.add_get("/profile", _profile)
    app.router.add_get("/cart/getcart", _cart)
    app.router.add_delete("/cart/remove", _remove)
    app.router.add_get("/products/search", _search)
    return app


@pytest.mark.asyncio
async def test_cookie_session_survives_between_calls(gateway_app):
    async with test_utils.TestServer(gateway_app) as server:
        async with HttpApi(str(server.make_url(""))) as client:
            err = err_value(await client.get_profile())
            assert err.kind == ApiErrorKind.UNAUTHORIZED
            assert err.status == 401

            ok_value(await client.login("ann@example.com", "hunter22"))

            assert ok_value(await client.get_profile()) == {"id": 1, "email": "ann@example.com"}


@pytest.mark.asyncio
async def test_server_error_maps_to_http_error(gateway_app):
    async with test_utils.TestServer(gateway_app) as server:
        async with HttpApi(str(server.make_url(""))) as client:
            err = err_value(await client.get_cart())

    assert err.kind == ApiErrorKind.HTTP
    assert err.status == 500
    assert err.detail == "something went wrong"


@pytest.mark.asyncio
async def test_delete_sends_json_body(gateway_app):
    async with test_utils.TestServer(gateway_app) as server:
        async with HttpApi(str(server.make_url(""))) as client:
            body = ok_value(await client.remove_from_cart("7"))

    assert body["echo"] == "7"


@pytest.mark.asyncio
async def test_plain_text_and_null_bodies(gateway_app):
    async with test_utils.TestServer(gateway_app) as server:
        async with HttpApi(str(server.make_url(""))) as client:
            assert ok_value(await client.register("Ann", "a@b.c", "pw")) == "user created!"
            assert ok_value(await client.search_products("none")) is None


@pytest.mark.asyncio
async def test_unreachable_gateway_is_a_network_error():
    async with HttpApi("http://127.0.0.1:9", timeout=timedelta(seconds=2)) as client:
        err = err_value(await client.get_profile())

    assert err.kind == ApiErrorKind.NETWORK


def test_decode_body():
    assert decode_body("") is None
    assert decode_body('{"a": 1}') == {"a": 1}
    assert decode_body("user created!") == "user created!"


@pytest.mark.asyncio
async def test_first_request_opens_the_session_it_keeps_using(gateway_app):
    async with test_utils.TestServer(gateway_app) as server:
        client = HttpApi(str(server.make_url("")))

        ok_value(await client.login("ann@example.com", "hunter22"))
        session = await client.open()

        assert await client.open() is session
        assert ok_value(await client.get_profile()) == {"id": 1, "email": "ann@example.com"}

        await client.close()
        assert session.closed

import asyncio

import pytest

from gatehouse import (
    App,
    AuthGuard,
    BusinessGuard,
    Controller,
    ForbiddenException,
    Guard,
    Response,
    SkipAuthorizationCheck,
    UseGuards,
    get,
)
from main import create_app

API_KEY = {"api_key": "MY_API_KEY"}

@pytest.fixture
def client():
    return create_app().test_client()

def test_unguarded_route(client):
    resp = client.get("/")
    assert resp.status == 200
    assert resp.body == "Hello World!"

def test_controller_scope_allows_valid_key(client):
    resp = client.get("/secure", headers={"api_key": "MY_API_KEY"})
    assert resp.status == 200
    assert resp.json_body() == {"message": "Authorized"}

def test_controller_scope_denies_wrong_key(client):
    resp = client.get("/secure", headers={"api_key": "MY_API"})
    assert resp.status == 403
    assert resp.json_body() == {"statusCode": 403, "message": "Forbidden resource", "error": "Forbidden"}

def test_route_guards_deny_without_business_id(client):
    resp = client.get("/test", headers=API_KEY)
    assert resp.status == 403

def test_route_guards_allow_with_both_headers(client):
    resp = client.get("/test", headers={"api_key": "MY_API_KEY", "business_id": "892367480"})
    assert resp.status == 200
    assert resp.body == "This is a Test Route"

def test_skip_metadata_bypasses_controller_guard(client):
    resp = client.get("/secure/public")
    assert resp.status == 200

def test_unknown_path_and_method(client):
    assert client.get("/missing").status == 404
    assert client.post("/secure").status == 405

def test_global_binding_applies_everywhere():
    client = create_app(global_auth=True).test_client()
    assert client.get("/").status == 403
    assert client.get("/", headers=API_KEY).status == 200
    assert client.get("/secure/public").status == 200

def test_provide_guard_replaces_default_instance(monkeypatch):
    monkeypatch.setenv("GATEHOUSE_API_KEY", "rotated")
    client = create_app().test_client()
    assert client.get("/secure", headers=API_KEY).status == 403
    assert client.get("/secure", headers={"api_key": "rotated"}).status == 200

def test_binding_order_is_global_controller_route():
    calls = []

    def recorder(name):
        class Recorder(Guard):
            def can_activate(self, context):
                calls.append(name)
                return True
        Recorder.__name__ = name
        return Recorder

    Global, Group, Route = recorder("global"), recorder("group"), recorder("route")

    @Controller("/items", guards=[Group])
    class ItemController:
        @get("{item_id}", guards=[Route])
        def show(self, item_id):
            return {"id": item_id}

    app = App()
    app.use_global_guards(Global)
    app.register_controller(ItemController)
    resp = app.test_client().get("/items/42")

    assert resp.json_body() == {"id": "42"}
    assert calls == ["global", "group", "route"]

def test_handler_does_not_run_when_denied():
    ran = []

    @Controller("/x", guards=[AuthGuard])
    class XController:
        @get()
        def index(self):
            ran.append(True)

    app = App()
    app.register_controller(XController)
    assert app.test_client().get("/x").status == 403
    assert ran == []

def test_async_guard_and_handler():
    class SlowAllow(Guard):
        async def can_activate(self, context):
            await asyncio.sleep(0)
            return context.headers.get("token") == "t"

    app = App()

    @app.get("/async", guards=[SlowAllow])
    async def handler(request):
        return {"path": request.path}

    client = app.test_client()
    assert client.get("/async").status == 403
    assert client.get("/async", headers={"token": "t"}).json_body() == {"path": "/async"}

def test_guard_can_raise_custom_rejection():
    class Rejecting(Guard):
        def can_activate(self, context):
            raise ForbiddenException("Nope")

    app = App()

    @app.get("/", guards=[Rejecting])
    def index():
        return "x"

    resp = app.test_client().get("/")
    assert resp.status == 403
    assert resp.json_body()["message"] == "Nope"

def test_handler_error_becomes_500():
    app = App()

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    assert app.test_client().get("/boom").status == 500

def test_use_guards_on_class_and_instances():
    @Controller("/both")
    @UseGuards(AuthGuard(api_key="k"), BusinessGuard)
    class BothController:
        @get()
        def index(self):
            return "ok"

    client = _client_for(BothController)
    assert client.get("/both", headers={"api_key": "k"}).status == 403
    assert client.get("/both", headers={"api_key": "k", "business_id": "892367480"}).status == 200

def test_class_skip_tag_bypasses_auth():
    @Controller("/open", guards=[AuthGuard])
    @SkipAuthorizationCheck()
    class OpenController:
        @get()
        def index(self):
            return "open"

    assert _client_for(OpenController).get("/open").status == 200

def test_bindings_frozen_after_build():
    app = create_app()
    app.build()
    with pytest.raises(RuntimeError):
        app.use_global_guards(AuthGuard)
    with pytest.raises(RuntimeError):
        app.provide_guard(AuthGuard())

def test_register_requires_controller_decorator():
    class NotAController:
        pass

    with pytest.raises(ValueError):
        App().register_controller(NotAController)

def test_route_table_guards():
    table = create_app().build()
    route, _ = table.match("GET", "/test")
    assert [type(g).__name__ for g in route.guards] == ["AuthGuard", "BusinessGuard"]
    route, _ = table.match("GET", "/secure/public")
    assert [type(g).__name__ for g in route.guards] == ["AuthGuard"]

def _client_for(controller_cls):
    app = App()
    app.register_controller(controller_cls)
    return app.test_client()

def _asgi_request(app, path, headers, method="GET"):
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "headers": [(k.encode(), v.encode()) for k, v in headers],
    }
    asyncio.run(app(scope, receive, send))
    return sent

def test_asgi_entry_point():
    app = create_app()
    sent = _asgi_request(app, "/secure", [("api_key", "MY_API_KEY")])
    assert sent[0]["status"] == 200
    assert sent[1]["body"] == b'{"message": "Authorized"}'

def test_asgi_duplicate_header_is_denied():
    app = create_app()
    sent = _asgi_request(app, "/secure", [("api_key", "MY_API_KEY"), ("api_key", "MY_API_KEY")])
    assert sent[0]["status"] == 403

def test_non_utf8_bytes_body_is_sent_as_is():
    app = App()

    @app.get("/raw")
    def raw():
        return b"\xff\x00"

    resp = app.test_client().get("/raw")
    assert resp.status == 200
    assert resp.body == b"\xff\x00"
    assert resp.content_type == "application/octet-stream"

    sent = _asgi_request(app, "/raw", [])
    assert sent[0]["status"] == 200
    assert sent[1]["body"] == b"\xff\x00"

def test_head_is_answered_by_get_route(client):
    resp = client.request("HEAD", "/")
    assert resp.status == 200
    assert resp.body == b""

def test_head_still_runs_guards(client):
    assert client.request("HEAD", "/secure").status == 403
    resp = client.request("HEAD", "/secure", headers=API_KEY)
    assert resp.status == 200
    assert resp.body == b""

def test_head_over_asgi_sends_empty_body():
    sent = _asgi_request(create_app(), "/", [], method="HEAD")
    assert sent[0]["status"] == 200
    assert sent[1]["body"] == b""

def test_websocket_scope_is_closed():
    sent = []

    async def receive():
        return {"type": "websocket.connect"}

    async def send(message):
        sent.append(message)

    asyncio.run(create_app()({"type": "websocket", "path": "/"}, receive, send))
    assert sent == [{"type": "websocket.close", "code": 1000}]

def test_unencodable_response_header_becomes_500():
    app = App()

    @app.get("/named")
    def named():
        return Response.text("x").with_header("X-Name", "名前")

    sent = _asgi_request(app, "/named", [])
    assert sent[0]["status"] == 500
    assert b"Internal server error" in sent[1]["body"]

import json

import httpx
import pytest

from magic_code.infrastructure.email.http_email_sender import HttpEmailCodeSender


def make_sender(handler, **kwargs) -> tuple[HttpEmailCodeSender, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    sender = HttpEmailCodeSender(base_url="http://smtp-mock:8025/", client=client, **kwargs)
    return sender, client


@pytest.mark.asyncio
async def test_delivers_code_to_identity_field():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["json"] = json.loads(request.content.decode("utf-8"))
        seen["idem"] = request.headers.get("Idempotency-Key")
        return httpx.Response(202, text="Accepted")

    sender, client = make_sender(handler)

    error = await sender({"email": "a@b.com"}, 123456, {"action": "login"})

    assert error is None
    assert seen["url"] == "http://smtp-mock:8025/send"
    assert seen["json"] == {
        "to": "a@b.com",
        "subject": "Your sign-in code",
        "body": "Your sign-in code is 123456",
    }
    assert seen["idem"] == "magic-code:a@b.com:123456"

    await client.aclose()


@pytest.mark.asyncio
async def test_register_message_and_custom_recipient_field():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["json"] = json.loads(request.content.decode("utf-8"))
        return httpx.Response(200, json={"ok": True})

    sender, client = make_sender(handler, recipient_field="login", subject="Welcome")

    assert await sender({"login": "x@y.com"}, 4321, {"action": "register"}) is None
    assert seen["json"]["to"] == "x@y.com"
    assert seen["json"]["subject"] == "Welcome"
    assert "registration code is 4321" in seen["json"]["body"]

    await client.aclose()


@pytest.mark.asyncio
async def test_relay_refusal_is_returned_not_raised():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(422, text="nope")

    sender, client = make_sender(handler)

    error = await sender({"email": "a@b.com"}, 123456, {"action": "login"})

    assert isinstance(error, RuntimeError)
    assert "mail relay responded 422" in str(error)
    assert "nope" in str(error)

    await client.aclose()


@pytest.mark.asyncio
async def test_network_error_is_returned():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    sender, client = make_sender(handler)

    error = await sender({"email": "a@b.com"}, 123456, {"action": "login"})

    assert isinstance(error, RuntimeError)
    assert "mail relay HTTP error:" in str(error)

    await client.aclose()


@pytest.mark.asyncio
async def test_record_without_recipient_is_an_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    sender, client = make_sender(handler)

    error = await sender({"phone": "555"}, 123456, {"action": "login"})

    assert isinstance(error, ValueError)
    assert calls == []

    await client.aclose()


@pytest.mark.asyncio
async def test_send_raises_on_non_2xx():
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="down")

    sender, client = make_sender(handler)

    with pytest.raises(RuntimeError):
        await sender.send(to="x@y.com", subject="S", body="B")

    await client.aclose()


@pytest.mark.asyncio
async def test_aclose_closes_owned_client_only():
    owned = HttpEmailCodeSender(base_url="http://smtp-mock:8025")
    await owned.aclose()
    assert owned._client.is_closed  # type: ignore[attr-defined]

    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    shared_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    not_owned = HttpEmailCodeSender(base_url="http://smtp-mock:8025", client=shared_client)

    await not_owned.aclose()
    assert shared_client.is_closed is False

    await shared_client.aclose()


@pytest.mark.asyncio
async def test_same_code_for_different_recipients_gets_distinct_keys():
    keys = []

    def handler(request: httpx.Request) -> httpx.Response:
        keys.append(request.headers.get("Idempotency-Key"))
        return httpx.Response(202)

    sender, client = make_sender(handler)

    await sender({"email": "a@b.com"}, 1234, {"action": "login"})
    await sender({"email": "c@d.com"}, 1234, {"action": "login"})

    assert keys == ["magic-code:a@b.com:1234", "magic-code:c@d.com:1234"]

    await client.aclose()

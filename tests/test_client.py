import pytest
import requests

from conftest import DST_API, SRC_API, FakeSession, envelope, make_response
from rdns_migrate.errors import APIError, TransportError
from rdns_migrate.models import Token
from rdns_migrate.rdns.client import RDNSClient
from rdns_migrate.rdns.fetcher import LegacyFetcher
from rdns_migrate.rdns.importer import Importer


def client_for(resp, strict=True):
    session = FakeSession({("GET", f"{SRC_API}/v1/domain/foo.bar.com"): resp})
    return RDNSClient(SRC_API + "/", strict_status=strict, session=session), session


def test_request_sets_json_header_and_timeout():
    session = FakeSession()
    client = RDNSClient(DST_API, timeout=5, session=session)
    client.post("v1/migrate/frozen", {"path": "x", "expiration": None})
    assert session.headers["Content-Type"] == "application/json"
    call = session.calls[0]
    assert call.url == f"{DST_API}/v1/migrate/frozen"
    assert call.body == {"path": "x", "expiration": None}
    assert call.timeout == 5


def test_get_sends_bearer_and_no_body():
    client, session = client_for(make_response(200, envelope({"fqdn": "foo.bar.com"})))
    resp = client.get("v1/domain/foo.bar.com", bearer="abc")
    assert resp.data.fqdn == "foo.bar.com"
    assert session.calls[0].headers == {"Authorization": "Bearer abc"}
    assert session.calls[0].body is None


@pytest.mark.parametrize("status", [400, 404, 500])
def test_strict_non_2xx_is_error_even_without_message(status):
    client, _ = client_for(make_response(status, envelope(status=status)))
    with pytest.raises(APIError) as exc:
        client.get("v1/domain/foo.bar.com")
    assert exc.value.status == status


def test_strict_error_uses_server_message():
    client, _ = client_for(make_response(403, envelope(status=403, msg="forbidden")))
    with pytest.raises(APIError, match="forbidden"):
        client.get("v1/domain/foo.bar.com")


def test_legacy_mode_ignores_messageless_errors():
    client, _ = client_for(make_response(500, envelope(status=500)), strict=False)
    assert client.get("v1/domain/foo.bar.com").status == 500


def test_legacy_mode_raises_when_message_present():
    client, _ = client_for(make_response(500, envelope(status=500, msg="boom")), strict=False)
    with pytest.raises(APIError, match="boom"):
        client.get("v1/domain/foo.bar.com")


def test_non_json_body_is_transport_error():
    client, _ = client_for(make_response(502, "<html>bad gateway</html>"))
    with pytest.raises(TransportError, match="bad gateway"):
        client.get("v1/domain/foo.bar.com")


def test_connection_failure_is_transport_error():
    client, _ = client_for(requests.ConnectionError("refused"))
    with pytest.raises(TransportError, match="refused"):
        client.get("v1/domain/foo.bar.com")


def test_context_manager_closes_session():
    session = FakeSession()
    with RDNSClient(DST_API, session=session):
        pass
    assert session.closed


class TestLegacyFetcher:
    def test_query_a_record(self, src_client, src_session):
        src_session.routes[("GET", f"{SRC_API}/v1/domain/foo.bar.com")] = make_response(
            200, envelope({"fqdn": "foo.bar.com", "hosts": ["1.2.3.4"]}))
        d = LegacyFetcher(src_client).query_a_record(Token(path="/token_origin/foo_bar_com", token="s"))
        assert d.hosts == ["1.2.3.4"]
        assert src_session.calls[0].headers["Authorization"].startswith("Bearer ")

    def test_query_txt_record_targets_acme_challenge(self, src_client, src_session):
        url = f"{SRC_API}/v1/domain/_acme-challenge.foo.bar.com/txt"
        src_session.routes[("GET", url)] = make_response(
            200, envelope({"fqdn": "_acme-challenge.foo.bar.com", "text": "xyz"}))
        d = LegacyFetcher(src_client).query_txt_record(Token(path="/token_origin/foo_bar_com", token="s"))
        assert d.text == "xyz"
        assert src_session.calls[0].url == url

    def test_each_query_derives_a_fresh_bearer(self, src_client, src_session):
        fetcher = LegacyFetcher(src_client)
        t = Token(path="/token_origin/foo_bar_com", token="s")
        fetcher.query_a_record(t)
        fetcher.query_a_record(t)
        first, second = (c.headers["Authorization"] for c in src_session.calls)
        assert first != second

    def test_errors_name_the_operation(self, src_client, src_session):
        src_session.routes[("GET", f"{SRC_API}/v1/domain/foo.bar.com")] = make_response(
            401, envelope(status=401, msg="unauthorized"))
        with pytest.raises(APIError, match="query_a_record") as exc:
            LegacyFetcher(src_client).query_a_record(Token(path="/token_origin/foo_bar_com", token="s"))
        assert exc.value.status == 401


class TestImporter:
    def test_post_token(self, dst_client, dst_session):
        Importer(dst_client).post_token(Token(path="foo.baz.com", token="s"))
        assert dst_session.posts(f"{DST_API}/v1/migrate/token") == [
            {"path": "foo.baz.com", "token": "s", "expiration": None}
        ]

    def test_post_failure_is_wrapped(self, dst_client, dst_session):
        dst_session.routes[("POST", f"{DST_API}/v1/migrate/token")] = requests.Timeout("slow")
        with pytest.raises(TransportError, match="post_token"):
            Importer(dst_client).post_token(Token(path="foo.baz.com", token="s"))


def test_wrongly_typed_envelope_is_transport_error():
    client, _ = client_for(make_response(200, {"status": [], "msg": "", "data": {}}))
    with pytest.raises(TransportError, match="decode response error"):
        client.get("v1/domain/foo.bar.com")

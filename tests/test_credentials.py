import pytest

from storefront_client.credentials import FileCredentialStore, InMemoryCredentialStore
from storefront_client.session import AuthSession


def test_in_memory_store_set_get_clear():
    store = InMemoryCredentialStore()

    store.set("k", "v")
    assert store.get("k") == "v"

    store.clear("k")
    store.clear("never-set")
    assert store.get("k") is None


def test_file_store_round_trips_across_instances(tmp_path):
    path = str(tmp_path / "nested" / "credentials.bin")

    FileCredentialStore(path).set("cookie_session:auth_token", "tok")

    assert FileCredentialStore(path).get("cookie_session:auth_token") == "tok"


def test_file_store_missing_file_reads_as_empty(tmp_path):
    store = FileCredentialStore(str(tmp_path / "credentials.bin"))

    assert store.get("anything") is None
    store.clear("anything")


def test_file_store_clear_removes_only_that_key(tmp_path):
    store = FileCredentialStore(str(tmp_path / "credentials.bin"))
    store.set("a", "1")
    store.set("b", "2")

    store.clear("a")

    assert store.get("a") is None
    assert store.get("b") == "2"


def test_file_store_ignores_corrupt_content(tmp_path):
    path = tmp_path / "credentials.bin"
    path.write_text("not json", encoding="utf-8")
    store = FileCredentialStore(str(path))
    if store.location != str(path):
        pytest.skip("persistence does not store plain text on this platform")

    assert store.get("a") is None
    store.set("a", "1")
    assert store.get("a") == "1"


def test_session_keys_are_namespaced_by_kind():
    store = InMemoryCredentialStore()
    vtex = AuthSession(store, "cookie_session")
    shopify = AuthSession(store, "header_token")

    vtex.save_token("cookie")
    vtex.save_order_form_id("of-1")

    assert store.snapshot() == {
        "cookie_session:auth_token": "cookie",
        "cookie_session:order_form_id": "of-1",
    }
    assert shopify.token() is None
    assert vtex.is_authenticated
    assert not shopify.is_authenticated


def test_session_clear_drops_token_and_cart():
    store = InMemoryCredentialStore(
        {"cookie_session:auth_token": "c", "cookie_session:order_form_id": "o", "header_token:auth_token": "h"}
    )

    AuthSession(store, "cookie_session").clear()

    assert store.snapshot() == {"header_token:auth_token": "h"}


def test_session_refuses_empty_token():
    store = InMemoryCredentialStore()

    with pytest.raises(ValueError):
        AuthSession(store, "cookie_session").save_token("")
    assert store.snapshot() == {}


def test_empty_stored_values_read_as_absent():
    session = AuthSession(InMemoryCredentialStore({"cookie_session:auth_token": ""}), "cookie_session")

    assert session.token() is None
    assert session.order_form_id() is None

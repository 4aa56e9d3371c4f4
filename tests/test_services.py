import pytest

from quartermaster.domain.forms import AssetForm
from quartermaster.exceptions import ApiError, InvalidResponseError, NetworkError
from quartermaster.services import ApiClient, AssetService, AuthService, ListParams, clean_params
from quartermaster.services.api import GENERIC_FAILURE, NO_RESPONSE
from quartermaster.views.forms import FormSubmitter, INVALID_FORM

from conftest import BASE_URL, FakeBackend


def make_client(backend, token=None):
    return ApiClient(BASE_URL, token_provider=lambda: token, session=backend)


def test_bearer_header_attached_only_with_token():
    backend = FakeBackend()
    backend.on("GET", "/assets", (200, {"assets": [], "total": 0}))

    make_client(backend).get("/assets")
    make_client(backend, token="tok-1").get("/assets")

    assert "Authorization" not in backend.calls[0]["headers"]
    assert backend.calls[1]["headers"]["Authorization"] == "Bearer tok-1"


def test_server_message_is_surfaced():
    backend = FakeBackend()
    backend.on("GET", "/assets/x", (404, {"message": "Asset not found"}))
    with pytest.raises(ApiError) as exc:
        make_client(backend).get("/assets/x")
    assert exc.value.status == 404
    assert exc.value.message == "Asset not found"


def test_error_without_message_gets_generic_text():
    backend = FakeBackend()
    backend.on("GET", "/assets", (500, None))
    with pytest.raises(ApiError) as exc:
        make_client(backend).get("/assets")
    assert exc.value.message == GENERIC_FAILURE


def test_unreachable_backend_is_a_network_error():
    backend = FakeBackend()
    backend.unreachable = True
    with pytest.raises(NetworkError) as exc:
        make_client(backend).get("/assets")
    assert str(exc.value) == NO_RESPONSE
    assert len(backend.calls) == 1


def test_clean_params_drops_unset_filters():
    assert clean_params({"base": "Base Alpha", "type": "", "search": None, "skip": 0}) == {"base": "Base Alpha", "skip": 0}


def test_list_sends_paging_and_sorting():
    backend = FakeBackend()
    backend.on("GET", "/assets", (200, {"assets": [
        {"_id": "a-1", "name": "Humvee", "type": "Vehicle", "base": "Base Alpha", "openingBalance": 4},
    ], "total": 31}))
    svc = AssetService(make_client(backend, "tok"))
    result = svc.list(ListParams(limit=10, skip=20, sort_by="name", sort_order="asc", filters={"base": "Base Alpha"}))

    assert result.total == 31
    assert result.items[0].id == "a-1"
    assert result.items[0].opening_balance == 4
    assert backend.calls[0]["params"] == {"limit": 10, "skip": 20, "sortBy": "name", "sortOrder": "asc", "base": "Base Alpha"}


def test_login_without_token_fails():
    backend = FakeBackend()
    backend.on("POST", "/auth/login", (200, {"user": {"username": "admin", "role": "Admin"}}))
    with pytest.raises(ApiError) as exc:
        AuthService(make_client(backend)).login("admin", "secret")
    assert exc.value.message == "Authentication failed. Please try again."


ASSET = {"name": "Humvee", "type": "Vehicle", "base": "Base Alpha", "openingBalance": 2}


def asset_submitter(backend):
    return FormSubmitter(
        schema=AssetForm,
        create=AssetService(make_client(backend, "tok")).create,
        detail_path="/assets/{id}",
        success_message="Asset created successfully",
        failure_message="Failed to create asset",
    )


def test_submit_creates_once_and_points_at_detail():
    backend = FakeBackend()
    backend.on("POST", "/assets", (201, {"asset": {"_id": "a-9", **ASSET}}))

    result = asset_submitter(backend).submit(ASSET)

    assert result.ok
    assert result.redirect_to == "/assets/a-9"
    assert backend.paths("POST") == ["/assets"]
    assert backend.calls[0]["json"] == ASSET


def test_invalid_submit_never_reaches_backend():
    backend = FakeBackend()
    result = asset_submitter(backend).submit({**ASSET, "name": ""})
    assert not result.ok
    assert result.status == 422
    assert result.message == INVALID_FORM
    assert result.errors == {"name": "Name is required"}
    assert backend.calls == []


def test_submit_failure_prefers_server_message():
    backend = FakeBackend()
    backend.on("POST", "/assets", (400, {"error": "Asset already exists"}))
    result = asset_submitter(backend).submit(ASSET)
    assert result.message == "Asset already exists"
    assert result.status == 400

    backend.on("POST", "/assets", (500, None))
    result = asset_submitter(backend).submit(ASSET)
    assert result.message == "Failed to create asset"


def test_login_without_user_fails_cleanly():
    backend = FakeBackend()
    backend.on("POST", "/auth/login", (200, {"token": "t"}))
    with pytest.raises(ApiError) as exc:
        AuthService(make_client(backend)).login("admin", "secret")
    assert exc.value.message == "Authentication failed. Please try again."


def test_profile_with_unknown_role_is_an_invalid_response():
    backend = FakeBackend()
    backend.on("GET", "/auth/me", (200, {"user": {"username": "x", "role": "Auditor"}}))
    with pytest.raises(InvalidResponseError) as exc:
        AuthService(make_client(backend, "tok-x")).me()
    assert exc.value.status == 502
    assert exc.value.message.startswith("Invalid response from server")


def test_incomplete_record_is_an_invalid_response():
    backend = FakeBackend()
    backend.on("GET", "/assets", (200, {"assets": [{"_id": "a-1", "name": "X"}]}))
    backend.on("GET", "/assets/a-1", (200, {"asset": {"_id": "a-1", "name": "X"}}))
    svc = AssetService(make_client(backend, "tok"))
    with pytest.raises(InvalidResponseError):
        svc.list()
    with pytest.raises(InvalidResponseError):
        svc.get("a-1")


def test_non_numeric_total_is_an_invalid_response():
    backend = FakeBackend()
    backend.on("GET", "/assets", (200, {"assets": [], "total": "many"}))
    with pytest.raises(InvalidResponseError):
        AssetService(make_client(backend, "tok")).list()

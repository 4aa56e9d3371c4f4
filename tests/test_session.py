from quartermaster.config import RoutingSettings
from quartermaster.domain.models import Role, Session, User
from quartermaster.exceptions import ApiError, InvalidResponseError, NetworkError
from quartermaster.session import (
    AuthStateStore,
    GateAction,
    MemoryTokenStorage,
    SessionGate,
    landing_path_for,
)


class FakeAuth:
    def __init__(self, me=None, login=None):
        self._me = me
        self._login = login
        self.me_calls = 0

    def me(self):
        self.me_calls += 1
        if isinstance(self._me, Exception):
            raise self._me
        return self._me

    def login(self, username, password):
        if isinstance(self._login, Exception):
            raise self._login
        return self._login


def make_user(role=Role.ADMIN, base=None):
    return User(username="someone", role=role, assigned_base=base)


def make_gate():
    routing = RoutingSettings()
    return SessionGate(routing.public_paths, routing.login_path, lambda user: landing_path_for(user, routing))


def test_initialize_without_token_skips_backend():
    auth = FakeAuth()
    store = AuthStateStore(auth, MemoryTokenStorage())
    session = store.initialize()
    assert session.is_initialized is True
    assert session.is_authenticated is False
    assert auth.me_calls == 0


def test_initialize_restores_user():
    user = make_user(Role.BASE_COMMANDER, "Base Alpha")
    store = AuthStateStore(FakeAuth(me=user), MemoryTokenStorage("tok"))
    store.initialize()
    assert store.is_authenticated
    assert store.user.assigned_base == "Base Alpha"


def test_initialize_rejected_token_is_cleared():
    storage = MemoryTokenStorage("stale")
    store = AuthStateStore(FakeAuth(me=ApiError(401, "Token is not valid")), storage)
    store.initialize()
    assert store.is_initialized
    assert not store.is_authenticated
    assert storage.get() is None


def test_initialize_network_failure_keeps_token():
    storage = MemoryTokenStorage("tok")
    store = AuthStateStore(FakeAuth(me=NetworkError("down")), storage)
    store.initialize()
    assert store.is_initialized
    assert not store.is_authenticated
    assert storage.get() == "tok"


def test_initialize_unreadable_profile_drops_token():
    storage = MemoryTokenStorage("tok")
    store = AuthStateStore(FakeAuth(me=InvalidResponseError("User (1 invalid fields)")), storage)
    session = store.initialize()
    assert session.is_initialized
    assert not session.is_authenticated
    assert storage.get() is None


def test_initialize_is_idempotent():
    auth = FakeAuth(me=make_user())
    store = AuthStateStore(auth, MemoryTokenStorage("tok"))
    store.initialize()
    store.initialize()
    assert auth.me_calls == 1


def test_login_failure_leaves_session_untouched():
    storage = MemoryTokenStorage()
    store = AuthStateStore(FakeAuth(login=ApiError(401, "Invalid credentials")), storage)
    store.initialize()
    try:
        store.login("admin", "wrong")
    except ApiError as exc:
        assert exc.message == "Invalid credentials"
    else:
        raise AssertionError("login should propagate the backend error")
    assert storage.get() is None
    assert not store.is_authenticated


def test_login_then_logout():
    user = make_user(Role.LOGISTICS_OFFICER, "Base Bravo")
    storage = MemoryTokenStorage()
    store = AuthStateStore(FakeAuth(login=(user, "tok-1")), storage)
    store.login("log1", "secret")
    assert storage.get() == "tok-1"
    assert store.landing_path() == "/assets"

    store.logout()
    assert storage.get() is None
    assert store.user is None
    assert not store.is_authenticated


def test_gate_waits_for_initialization():
    decision = make_gate().decide("/dashboard", Session())
    assert decision.action == GateAction.LOADING


def test_gate_sends_anonymous_viewers_to_login():
    decision = make_gate().decide("/assets/123", Session(is_initialized=True))
    assert decision.action == GateAction.REDIRECT
    assert decision.redirect_to == "/login"


def test_gate_renders_public_page_for_anonymous_viewer_without_chrome():
    decision = make_gate().decide("/forgot-password/", Session(is_initialized=True))
    assert decision.action == GateAction.RENDER
    assert decision.show_chrome is False


def test_gate_bounces_authenticated_viewer_off_public_pages():
    session = Session(user=make_user(Role.BASE_COMMANDER, "Base Alpha"), is_authenticated=True, is_initialized=True)
    decision = make_gate().decide("/login?next=/dashboard", session)
    assert decision.action == GateAction.REDIRECT
    assert decision.redirect_to == "/assets"


def test_gate_shows_chrome_for_authenticated_pages():
    session = Session(user=make_user(), is_authenticated=True, is_initialized=True)
    decision = make_gate().decide("/dashboard", session)
    assert decision.action == GateAction.RENDER
    assert decision.show_chrome is True

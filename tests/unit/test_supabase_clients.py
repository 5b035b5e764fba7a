"""Unit tests for the PostgREST and GoTrue clients over httpx.MockTransport."""

import json

import httpx
import pytest

from legality.application.dtos.profile import Profile
from legality.application.services.session_store import SessionStore
from legality.application.use_cases.cases import CaseTaskQueryEngine
from legality.domain.enums import ProfileRole, TaskStatus
from legality.domain.exceptions import (
    AuthenticationException,
    ProfileNotFoundException,
    StoreRequestException,
    StoreUnavailableException,
    ValidationException,
)
from legality.infrastructure.supabase._auth_client import GoTrueClient
from legality.infrastructure.supabase._rest_client import PostgrestClient, _parse_count
from legality.infrastructure.supabase.client import supabase_repositories
from legality.infrastructure.supabase.repositories.profile_repo import SupabaseProfileRepository
from legality.infrastructure.supabase.repositories.tarea_repo import SupabaseTaskRepository
from legality.shared.enums import AuthChangeEvent
from tests.fakes import FakeIdentityProvider, make_identity

REST_URL = "https://test-project.supabase.co/rest/v1"
AUTH_URL = "https://test-project.supabase.co/auth/v1"

USER = {
    "id": "u-1",
    "email": "ana@example.com",
    "user_metadata": {"full_name": "Ana Ruiz"},
    "created_at": "2024-01-15T10:00:00Z",
}
TOKEN_BODY = {
    "access_token": "access-1",
    "refresh_token": "refresh-1",
    "expires_in": 3600,
    "user": USER,
}


class Recorder:
    """MockTransport handler that records requests and replies from a queue."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0) if self._responses else httpx.Response(200, json=[])


def _http(recorder: Recorder) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(recorder))


class TestParseCount:
    @pytest.mark.parametrize(
        "header,expected",
        [("0-9/42", 42), ("*/0", 0), ("0-0/*", None), (None, None), ("", None)],
    )
    def test_content_range(self, header, expected) -> None:
        assert _parse_count(header) == expected


class TestPostgrestClient:
    async def test_anon_key_is_used_without_user_token(self) -> None:
        recorder = Recorder()
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            await client.table("empresas").select("id, nombre").order("nombre").execute()

        request = recorder.requests[0]
        assert request.headers["apikey"] == "anon"
        assert request.headers["Authorization"] == "Bearer anon"
        assert request.url.path == "/rest/v1/empresas"
        assert request.url.params["select"] == "id,nombre"
        assert request.url.params["order"] == "nombre.asc"

    async def test_token_source_is_read_per_request(self) -> None:
        recorder = Recorder()
        token = {"value": None}
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http).with_token(lambda: token["value"])
            await client.table("casos").select().execute()
            token["value"] = "user-token"
            await client.table("casos").select().execute()

        assert recorder.requests[0].headers["Authorization"] == "Bearer anon"
        assert recorder.requests[1].headers["Authorization"] == "Bearer user-token"

    async def test_filters_and_in_list_quoting(self) -> None:
        recorder = Recorder()
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            await (
                client.table("tareas")
                .select()
                .eq("estado", TaskStatus.PENDIENTE)
                .in_("caso_id", ["a", "b,c"])
                .is_("asignado_a", None)
                .execute()
            )

        params = recorder.requests[0].url.params
        assert params["estado"] == "eq.pendiente"
        assert params["caso_id"] == 'in.(a,"b,c")'
        assert params["asignado_a"] == "is.null"

    async def test_exact_count_uses_head_and_content_range(self) -> None:
        recorder = Recorder(httpx.Response(200, headers={"content-range": "*/7"}))
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            result = await client.table("profiles").select("id", count="exact", head=True).execute()

        request = recorder.requests[0]
        assert request.method == "HEAD"
        assert request.headers["Prefer"] == "count=exact"
        assert result.count == 7
        assert result.data == []

    async def test_insert_asks_for_representation_and_single_object(self) -> None:
        recorder = Recorder(httpx.Response(201, json={"id": "emp-1", "nombre": "Acme"}))
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            result = await client.table("empresas").insert({"nombre": "Acme"}).single().execute()

        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.headers["Prefer"] == "return=representation"
        assert request.headers["Accept"] == "application/vnd.pgrst.object+json"
        assert result.data == {"id": "emp-1", "nombre": "Acme"}

    async def test_server_error_is_store_unavailable(self) -> None:
        recorder = Recorder(httpx.Response(503, text="upstream down"))
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            with pytest.raises(StoreUnavailableException) as exc_info:
                await client.table("casos").select().execute()

        assert exc_info.value.details["status_code"] == 503

    async def test_transport_error_is_store_unavailable(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            with pytest.raises(StoreUnavailableException):
                await client.table("casos").select().execute()

    async def test_non_json_success_body_is_store_unavailable(self) -> None:
        recorder = Recorder(
            httpx.Response(200, text="<html>proxy</html>", headers={"content-type": "text/html"})
        )
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            with pytest.raises(StoreUnavailableException) as exc_info:
                await client.table("casos").select().execute()

        assert exc_info.value.details["status_code"] == 200

    async def test_redirect_loop_is_store_unavailable(self) -> None:
        def loop(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("Exceeded maximum allowed redirects.", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(loop)) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            with pytest.raises(StoreUnavailableException):
                await client.table("casos").select().execute()

    async def test_client_error_carries_postgrest_code(self) -> None:
        body = {"code": "23505", "message": "duplicate key value", "hint": None}
        recorder = Recorder(httpx.Response(409, json=body))
        async with _http(recorder) as http:
            client = PostgrestClient(REST_URL, "anon", http_client=http)
            with pytest.raises(StoreRequestException) as exc_info:
                await client.table("profiles").insert({"id": "u-1"}).execute()

        assert exc_info.value.code == "23505"
        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "duplicate key value"


class TestSupabaseRepositories:
    async def test_missing_profile_row_maps_to_profile_not_found(self) -> None:
        body = {"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"}
        recorder = Recorder(httpx.Response(406, json=body))
        async with _http(recorder) as http:
            repo = SupabaseProfileRepository(PostgrestClient(REST_URL, "anon", http_client=http))
            with pytest.raises(ProfileNotFoundException):
                await repo.get_by_id("u-404")

        assert recorder.requests[0].url.params["id"] == "eq.u-404"

    async def test_profile_row_with_unknown_role_maps_to_unknown(self) -> None:
        row = {"id": "u-1", "email": "a@x.com", "full_name": "A", "role": "colaborador"}
        recorder = Recorder(httpx.Response(200, json=row))
        async with _http(recorder) as http:
            repo = SupabaseProfileRepository(PostgrestClient(REST_URL, "anon", http_client=http))
            profile = await repo.get_by_id("u-1")

        assert profile.role is ProfileRole.UNKNOWN

    async def test_unreadable_store_body_becomes_failure_result(self) -> None:
        recorder = Recorder(httpx.Response(200, text="<html>proxy</html>"))
        store = SessionStore(FakeIdentityProvider())
        store.set_identity(make_identity("admin"))
        store.set_profile(Profile(id="admin", email="admin@x.com", full_name="Admin", role=ProfileRole.ADMIN))
        async with _http(recorder) as http:
            repos = supabase_repositories(PostgrestClient(REST_URL, "anon", http_client=http))
            engine = CaseTaskQueryEngine(store, repos.cases, repos.tasks, repos.assignments)
            result = await engine.cases_visible_to()

        assert result.ok is False
        assert result.error_code == "STORE_UNAVAILABLE"

    async def test_pending_task_count_for_user(self) -> None:
        recorder = Recorder(httpx.Response(200, headers={"content-range": "*/3"}))
        async with _http(recorder) as http:
            repo = SupabaseTaskRepository(PostgrestClient(REST_URL, "anon", http_client=http))
            count = await repo.count(estado=TaskStatus.PENDIENTE, asignado_a="u-1")

        params = recorder.requests[0].url.params
        assert count == 3
        assert params["estado"] == "eq.pendiente"
        assert params["asignado_a"] == "eq.u-1"


class TestGoTrueClient:
    async def test_password_sign_in_stores_session_and_notifies(self) -> None:
        recorder = Recorder(httpx.Response(200, json=TOKEN_BODY))
        events: list[AuthChangeEvent] = []

        async def listener(event, session) -> None:
            events.append(event)

        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            client.on_auth_state_change(listener)
            session = await client.sign_in_with_password("ana@example.com", "secret123")

        request = recorder.requests[0]
        assert request.url.path == "/auth/v1/token"
        assert request.url.params["grant_type"] == "password"
        assert session.user.id == "u-1"
        assert session.user.user_metadata["full_name"] == "Ana Ruiz"
        assert session.expires_at is not None
        assert client.access_token == "access-1"
        assert events == [AuthChangeEvent.SIGNED_IN]

    async def test_rejected_credentials_raise_authentication_error(self) -> None:
        body = {"error": "invalid_grant", "error_description": "Invalid login credentials"}
        recorder = Recorder(httpx.Response(400, json=body))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            with pytest.raises(AuthenticationException) as exc_info:
                await client.sign_in_with_password("ana@example.com", "wrong")

        assert exc_info.value.message == "Invalid login credentials"
        assert client.access_token is None

    async def test_sign_up_pending_confirmation_has_no_session(self) -> None:
        recorder = Recorder(httpx.Response(200, json=USER))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            result = await client.sign_up("ana@example.com", "secret123", {"full_name": "Ana Ruiz"})

        assert result.session is None
        assert result.user.email == "ana@example.com"
        assert recorder.requests[0].url.path == "/auth/v1/signup"

    async def test_sign_up_rejection_is_validation_error(self) -> None:
        recorder = Recorder(httpx.Response(422, json={"msg": "User already registered"}))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            with pytest.raises(ValidationException):
                await client.sign_up("ana@example.com", "secret123")

    async def test_adopted_token_is_validated_lazily(self) -> None:
        recorder = Recorder(httpx.Response(200, json=USER))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http).fork()
            client.use_access_token("bearer-1")
            assert recorder.requests == []

            session = await client.get_session()

        assert session is not None
        assert session.user.id == "u-1"
        assert recorder.requests[0].headers["Authorization"] == "Bearer bearer-1"
        assert client.access_token == "bearer-1"

    async def test_expired_token_yields_no_session(self) -> None:
        recorder = Recorder(httpx.Response(401, json={"msg": "invalid JWT"}))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            client.use_access_token("expired")
            assert await client.get_session() is None

    async def test_sign_out_clears_locally_even_when_remote_rejects(self) -> None:
        recorder = Recorder(
            httpx.Response(200, json=TOKEN_BODY),
            httpx.Response(401, json={"msg": "session not found"}),
        )
        events: list[AuthChangeEvent] = []

        async def listener(event, session) -> None:
            events.append(event)

        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            await client.sign_in_with_password("ana@example.com", "secret123")
            client.on_auth_state_change(listener)
            await client.sign_out()

        assert recorder.requests[1].url.path == "/auth/v1/logout"
        assert client.access_token is None
        assert events == [AuthChangeEvent.SIGNED_OUT]

    async def test_oauth_url_includes_redirect(self) -> None:
        async with _http(Recorder()) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            url = await client.sign_in_with_oauth("google", "https://portal.example.com/auth/callback")

        assert url.startswith(f"{AUTH_URL}/authorize?provider=google")
        assert "redirect_to=https%3A%2F%2Fportal.example.com%2Fauth%2Fcallback" in url

    async def test_refresh_exchanges_cookie_token_and_notifies(self) -> None:
        recorder = Recorder(httpx.Response(200, json={**TOKEN_BODY, "access_token": "access-2"}))
        events: list[AuthChangeEvent] = []

        async def listener(event, session) -> None:
            events.append(event)

        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            client.on_auth_state_change(listener)
            session = await client.refresh_session("refresh-1")

        request = recorder.requests[0]
        assert request.url.params["grant_type"] == "refresh_token"
        assert json.loads(request.content) == {"refresh_token": "refresh-1"}
        assert session.access_token == "access-2"
        assert client.access_token == "access-2"
        assert events == [AuthChangeEvent.TOKEN_REFRESHED]

    async def test_refresh_without_token_makes_no_request(self) -> None:
        recorder = Recorder()
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            assert await client.refresh_session() is None

        assert recorder.requests == []

    async def test_rejected_refresh_token_raises_authentication_error(self) -> None:
        body = {"error": "invalid_grant", "error_description": "Invalid Refresh Token"}
        recorder = Recorder(httpx.Response(400, json=body))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            with pytest.raises(AuthenticationException):
                await client.refresh_session("revoked")

    async def test_non_json_user_body_is_store_unavailable(self) -> None:
        recorder = Recorder(httpx.Response(200, text="<html>maintenance</html>"))
        async with _http(recorder) as http:
            client = GoTrueClient(AUTH_URL, "anon", http_client=http)
            client.use_access_token("bearer-1")
            with pytest.raises(StoreUnavailableException):
                await client.get_session()

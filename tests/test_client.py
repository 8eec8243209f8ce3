import json
import os
import re

import pytest
import responses

from env0cli.client import BASE_URL, Client, ClientError, load_token, save_auth


@pytest.fixture
def rsps():
    with responses.RequestsMock() as mock:
        yield mock


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


APPS_PATTERN = re.compile(re.escape(BASE_URL) + r"/api/v1/apps/.*")


def test_client_error_str_with_message():
    err = ClientError(400, "bad input")
    assert str(err) == "status 400: bad input"
    assert err.status == 400
    assert err.message == "bad input"


def test_client_error_str_without_message():
    assert str(ClientError(500)) == "status 500"


def test_signup_success_sends_body_without_auth(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/register", status=201, json={})
    username = "alice"
    email = "alice@example.com"
    password = "password"
    result = Client().signup(username, email, password)
    assert result is None
    assert len(rsps.calls) == 1
    request = rsps.calls[0].request
    assert json.loads(request.body) == {
        "username": username,
        "email": email,
        "password": password,
    }
    assert request.headers["Content-Type"] == "application/json"
    assert "Authorization" not in request.headers


def test_signup_error_with_message(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/register", status=409, json={"error": "taken"})
    with pytest.raises(ClientError) as info:
        Client().signup("alice", "alice@example.com", "password")
    assert info.value.status == 409
    assert info.value.message == "taken"
    assert str(info.value) == "status 409: taken"


def test_signup_error_without_json(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/register", status=500, body="oops")
    with pytest.raises(ClientError) as info:
        Client().signup("alice", "alice@example.com", "password")
    assert info.value.message is None
    assert str(info.value) == "status 500"


def test_signup_ok_status_is_still_an_error(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/register", status=200, json={})
    with pytest.raises(ClientError) as info:
        Client().signup("alice", "alice@example.com", "password")
    assert info.value.status == 200


def test_login_saves_and_uses_token(rsps, home):
    rsps.add(
        responses.POST,
        BASE_URL + "/api/v1/login",
        status=200,
        json={"token": "token", "user": {"id": "1", "username": "alice", "email": "alice@example.com"}},
    )
    client = Client()
    client.login("alice", "password")
    assert client.token == "token"
    assert load_token() == "token"
    body = json.loads(rsps.calls[0].request.body)
    assert body == {"emailOrUsername": "alice", "password": "password"}


def test_login_failure_stores_nothing(rsps, home):
    rsps.add(responses.POST, BASE_URL + "/api/v1/login", status=401, json={"error": "nope"})
    client = Client()
    with pytest.raises(ClientError) as info:
        client.login("alice", "password")
    assert info.value.status == 401
    assert client.token == ""
    with pytest.raises(FileNotFoundError):
        load_token()


def test_login_invalid_body_raises(rsps, home):
    rsps.add(responses.POST, BASE_URL + "/api/v1/login", status=200, body="not json")
    with pytest.raises(ValueError):
        Client().login("alice", "password")


def test_create_app_returns_owner_and_sends_token(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/apps", status=201, json={"ownerName": "alice"})
    owner = Client("token").create_app("shop")
    assert owner == "alice"
    request = rsps.calls[0].request
    assert request.headers["Authorization"] == "token"
    assert json.loads(request.body) == {"name": "shop"}


def test_create_app_without_owner_returns_empty(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/apps", status=201, json={})
    assert Client("token").create_app("shop") == ""


def test_create_app_error(rsps):
    rsps.add(responses.POST, BASE_URL + "/api/v1/apps", status=400, json={"error": "exists"})
    with pytest.raises(ClientError) as info:
        Client("token").create_app("shop")
    assert info.value.message == "exists"


def test_get_app_escapes_name_and_returns_envs(rsps):
    envs = {"": {"A": "1"}, "prod": {"B": "2"}}
    rsps.add(responses.GET, APPS_PATTERN, status=200, json={"envs": envs})
    result = Client("token").get_app("alice/my app")
    assert result == envs
    assert rsps.calls[0].request.path_url == "/api/v1/apps/alice%2Fmy%20app"


def test_get_app_missing_envs_is_empty(rsps):
    rsps.add(responses.GET, APPS_PATTERN, status=200, json={})
    assert Client("token").get_app("alice/shop") == {}


def test_get_app_error(rsps):
    rsps.add(responses.GET, APPS_PATTERN, status=404, json={"error": "not found"})
    with pytest.raises(ClientError) as info:
        Client("token").get_app("alice/shop")
    assert info.value.status == 404


def test_update_app_sends_envs(rsps):
    rsps.add(responses.PUT, APPS_PATTERN, status=200, json={})
    envs = {"prod": {"KEY": "value"}}
    Client("token").update_app("alice/shop", envs)
    request = rsps.calls[0].request
    assert json.loads(request.body) == {"envs": envs}
    assert request.path_url == "/api/v1/apps/alice%2Fshop"


def test_update_app_error(rsps):
    rsps.add(responses.PUT, APPS_PATTERN, status=403, json={"error": "forbidden"})
    with pytest.raises(ClientError) as info:
        Client("token").update_app("alice/shop", {})
    assert str(info.value) == "status 403: forbidden"


def test_add_user_uses_put(rsps):
    rsps.add(responses.PUT, APPS_PATTERN, status=200, json={})
    app_name = "alice/shop"
    username = "bob"
    result = Client("token").add_user(app_name, username)
    assert result is None
    assert len(rsps.calls) == 1
    request = rsps.calls[0].request
    assert request.method == "PUT"
    assert request.path_url == "/api/v1/apps/alice%2Fshop/users/" + username
    assert request.body is None


def test_remove_user_uses_delete(rsps):
    rsps.add(responses.DELETE, APPS_PATTERN, status=200, json={})
    app_name = "alice/shop"
    username = "bob"
    result = Client("token").remove_user(app_name, username)
    assert result is None
    assert len(rsps.calls) == 1
    request = rsps.calls[0].request
    assert request.method == "DELETE"
    assert request.path_url == "/api/v1/apps/alice%2Fshop/users/" + username


def test_remove_user_error(rsps):
    rsps.add(responses.DELETE, APPS_PATTERN, status=404, body="")
    with pytest.raises(ClientError) as info:
        Client("token").remove_user("alice/shop", "bob")
    assert info.value.status == 404
    assert info.value.message is None


def test_custom_base_url(rsps):
    rsps.add(responses.POST, "http://localhost:8080/api/v1/apps", status=201, json={"ownerName": "alice"})
    assert Client("token", base_url="http://localhost:8080").create_app("shop") == "alice"


def test_save_auth_writes_file(home):
    result = save_auth("token")
    assert result is None
    path = home / ".env0_cfg" / "auth.json"
    assert path.read_bytes() == b'{"token":"token"}'
    assert os.stat(path).st_mode & 0o777 == 0o600
    assert load_token() == "token"


def test_save_auth_round_trip_overwrites(home):
    save_auth("secret")
    save_auth("token")
    assert load_token() == "token"


def test_load_token_missing_file(home):
    with pytest.raises(FileNotFoundError):
        load_token()


def test_load_token_invalid_json(home):
    directory = home / ".env0_cfg"
    directory.mkdir()
    (directory / "auth.json").write_text("{broken")
    with pytest.raises(ValueError):
        load_token()


def test_load_token_without_key_is_empty(home):
    directory = home / ".env0_cfg"
    directory.mkdir()
    (directory / "auth.json").write_text("{}")
    assert load_token() == ""
"""HTTP client for the Env0 API and storage of the authentication token."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from urllib.parse import quote

import requests

BASE_URL = "https://env0-api.vercel.app"

_CONFIG_DIR_NAME = ".env0_cfg"
_AUTH_FILE_NAME = "auth.json"

Envs = dict[str, dict[str, Any]]


class ClientError(Exception):
    """An API call answered with an unexpected HTTP status."""

    def __init__(self, status: int, message: str | None = None) -> None:
        self.status = status
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message is not None:
            return f"status {self.status}: {self.message}"
        return f"status {self.status}"


def _escape_segment(value: str) -> str:
    """Escape a value so it forms a single URL path segment."""
    return quote(value, safe=":@&=+$")


def _decode_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except ValueError:
        return None


def _error_from(response: requests.Response) -> ClientError:
    payload = _decode_json(response.content)
    if isinstance(payload, dict) and isinstance(payload.get("error"), str):
        return ClientError(response.status_code, payload["error"])
    return ClientError(response.status_code)


class Client:
    """Client for the Env0 REST API. An empty token makes unauthenticated calls."""

    def __init__(self, token: str = "", base_url: str = BASE_URL) -> None:
        self.token = token
        self.base_url = base_url

    def _request(self, method: str, path: str, body: Any = None) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = self.token
        data = json.dumps(body).encode() if body is not None else None
        return requests.request(method, self.base_url + path, data=data, headers=headers)

    def _expect(self, response: requests.Response, status: int) -> None:
        if response.status_code != status:
            raise _error_from(response)

    @staticmethod
    def _app_path(full_app_name: str) -> str:
        return "/api/v1/apps/" + _escape_segment(full_app_name)

    def signup(self, username: str, email: str, password: str) -> None:
        """Register a new user account."""
        body = {"username": username, "email": email, "password": password}
        response = self._request("POST", "/api/v1/register", body)
        self._expect(response, 201)

    def login(self, username_or_email: str, password: str) -> None:
        """Authenticate, persist the returned token and use it from now on."""
        body = {"emailOrUsername": username_or_email, "password": password}
        response = self._request("POST", "/api/v1/login", body)
        self._expect(response, 200)
        payload = json.loads(response.content)
        token = payload.get("token", "") if isinstance(payload, dict) else ""
        if not isinstance(token, str):
            raise ValueError("login response holds a token that is not a string")
        save_auth(token)
        self.token = token

    def create_app(self, name: str) -> str:
        """Create an app and return the name of its owner."""
        response = self._request("POST", "/api/v1/apps", {"name": name})
        self._expect(response, 201)
        payload = _decode_json(response.content)
        if isinstance(payload, dict) and isinstance(payload.get("ownerName"), str):
            return payload["ownerName"]
        return ""

    def get_app(self, full_app_name: str) -> Envs:
        """Return the environments of an app, keyed by environment name."""
        response = self._request("GET", self._app_path(full_app_name))
        self._expect(response, 200)
        payload = _decode_json(response.content)
        envs = payload.get("envs") if isinstance(payload, dict) else None
        if not isinstance(envs, dict):
            return {}
        return {
            name: variables
            for name, variables in envs.items()
            if isinstance(variables, dict)
        }

    def update_app(self, full_app_name: str, envs: Envs) -> None:
        """Replace the environments of an app."""
        response = self._request("PUT", self._app_path(full_app_name), {"envs": envs})
        self._expect(response, 200)

    def add_user(self, full_app_name: str, username: str) -> None:
        """Give a user access to an app."""
        path = self._app_path(full_app_name) + "/users/" + _escape_segment(username)
        self._expect(self._request("PUT", path), 200)

    def remove_user(self, full_app_name: str, username: str) -> None:
        """Take a user's access to an app away."""
        path = self._app_path(full_app_name) + "/users/" + _escape_segment(username)
        self._expect(self._request("DELETE", path), 200)


def _config_dir() -> Path:
    return Path(os.environ.get("HOME", "")) / _CONFIG_DIR_NAME


def save_auth(token: str) -> None:
    """Store the token in the user's home directory."""
    directory = _config_dir()
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    data = json.dumps({"token": token}, separators=(",", ":")).encode()
    fd = os.open(directory / _AUTH_FILE_NAME, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)


def load_token() -> str:
    """Read the stored token; raise OSError when none is stored, ValueError when it is unreadable."""
    data = (_config_dir() / _AUTH_FILE_NAME).read_bytes()
    auth = json.loads(data)
    if not isinstance(auth, dict):
        raise ValueError("authentication file does not hold an object")
    token = auth.get("token", "")
    if not isinstance(token, str):
        raise ValueError("authentication file holds a token that is not a string")
    return token
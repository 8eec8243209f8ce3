"""The Env0 commands: account handling, app set-up and syncing of .env files."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import requests

from env0cli.client import Client, ClientError, load_token

VERSION = "v0.0.3"

DEFAULT_TARGET_ENV = "default"

_CONFIG_DIR = Path(".env0")
_CONFIG_FILE = _CONFIG_DIR / "config.json"

_API_ERRORS = (ClientError, requests.RequestException)


def _format_value(value: Any) -> str:
    """Render a decoded JSON value the way the files store it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<nil>"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, list):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        items = " ".join(f"{key}:{_format_value(value[key])}" for key in sorted(value))
        return f"map[{items}]"
    return str(value)


def parse_env(text: str) -> dict[str, str]:
    """Parse the text of a .env file into its variables.

    Blank lines are skipped; every other line must hold a '='.
    """
    variables: dict[str, str] = {}
    for line in text.split("\n"):
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ValueError(f"line without '=': {line!r}")
        variables[key] = value
    return variables


def format_env(variables: Mapping[str, Any]) -> str:
    """Render variables as the lines of a .env file, sorted by name."""
    return "".join(f"{key}={_format_value(variables[key])}\n" for key in sorted(variables))


def _authenticated_client() -> Client | None:
    try:
        token = load_token()
    except (OSError, ValueError):
        print("Authenticate first")
        return None
    if not token:
        print("Authenticate again")
        return None
    return Client(token)


def _configured_app_name() -> str | None:
    try:
        data = _CONFIG_FILE.read_bytes()
    except OSError:
        print("App not initialized")
        return None
    try:
        config = json.loads(data)
    except ValueError:
        config = {}
    if not isinstance(config, dict):
        config = {}
    owner = config.get("ownerName")
    app = config.get("appName")
    owner = owner if isinstance(owner, str) else ""
    app = app if isinstance(app, str) else ""
    return f"{owner}/{app}"


def _target(env_name: str | None) -> str | None:
    if env_name == DEFAULT_TARGET_ENV:
        return ""
    return env_name


def signup(username: str, email: str, password: str) -> None:
    """Create a new Env0 account."""
    try:
        Client().signup(username, email, password)
    except _API_ERRORS as exc:
        print(exc)
        return
    print("Signup ok")


def login(username_or_email: str, password: str) -> None:
    """Authenticate with Env0 and store the token."""
    try:
        Client().login(username_or_email, password)
    except (*_API_ERRORS, ValueError, OSError) as exc:
        print(exc)
        return
    print("Login ok")


def init_app(app_name: str) -> None:
    """Create a new app and record it in the current directory."""
    client = _authenticated_client()
    if client is None:
        return
    if _CONFIG_DIR.exists():
        print("This app already has a configuration, use clone command instead")
        return
    try:
        owner_name = client.create_app(app_name)
    except _API_ERRORS as exc:
        if isinstance(exc, ClientError) and exc.message is not None:
            print(exc.message)
        else:
            print("App creation failed")
        return
    config = {"appName": app_name, "ownerName": owner_name}
    _CONFIG_DIR.mkdir(mode=0o755)
    _CONFIG_FILE.write_text(json.dumps(config, indent=2), encoding="utf-8")
    print("App created")


def clone(full_app_name: str) -> None:
    """Fetch an existing app's environments into the current directory."""
    client = _authenticated_client()
    if client is None:
        return
    if _CONFIG_FILE.exists():
        print("There is an app already cloned")
        return
    try:
        envs = client.get_app(full_app_name)
    except _API_ERRORS as exc:
        print(exc)
        return
    for env_name, variables in envs.items():
        Path(f".env.{env_name}").write_text(format_env(variables), encoding="utf-8")

    owner, sep, app = full_app_name.partition("/")
    if not sep:
        raise ValueError(f"app name {full_app_name!r} is not of the form owner/app")
    _CONFIG_DIR.mkdir(mode=0o755, parents=True, exist_ok=True)
    config = {"appName": app, "ownerName": owner}
    _CONFIG_FILE.write_text(json.dumps(config), encoding="utf-8")
    print("App cloned")


def pull(env_name: str | None = None) -> None:
    """Write the app's environments, or only the named one, to .env files."""
    target = _target(env_name)
    client = _authenticated_client()
    if client is None:
        return
    full_app_name = _configured_app_name()
    if full_app_name is None:
        return
    try:
        envs = client.get_app(full_app_name)
    except _API_ERRORS as exc:
        print(exc)
        return
    for name, variables in envs.items():
        if target is not None and name != target:
            continue
        file_name = ".env" if name == "" else f".env.{name}"
        Path(file_name).write_text(format_env(variables), encoding="utf-8")
    print("Envs pulled")


def _read_local_envs(target: str | None) -> dict[str, dict[str, Any]]:
    envs: dict[str, dict[str, Any]] = {}
    for name in sorted(os.listdir(".")):
        if name != ".env" and not name.startswith(".env."):
            continue
        env_name = "" if name == ".env" else name[len(".env."):]
        if target is not None and env_name != target:
            continue
        try:
            content = Path(name).read_text(encoding="utf-8")
        except OSError:
            content = ""
        envs[env_name] = dict(parse_env(content))
    if target is not None and target not in envs:
        envs[target] = {}
    return envs


def push(env_name: str | None = None) -> None:
    """Send the local .env files, or only the named one, to the app."""
    client = _authenticated_client()
    if client is None:
        return
    full_app_name = _configured_app_name()
    if full_app_name is None:
        return
    envs = _read_local_envs(_target(env_name))
    try:
        client.update_app(full_app_name, envs)
    except _API_ERRORS as exc:
        print(exc)
        return
    print("Envs pushed")


def add_user(username: str) -> None:
    """Give a user access to the app of the current directory."""
    client = _authenticated_client()
    if client is None:
        return
    full_app_name = _configured_app_name()
    if full_app_name is None:
        return
    try:
        client.add_user(full_app_name, username)
    except _API_ERRORS as exc:
        print(exc)
        return
    print("User added")


def del_user(username: str) -> None:
    """Take a user's access to the app of the current directory away."""
    client = _authenticated_client()
    if client is None:
        return
    full_app_name = _configured_app_name()
    if full_app_name is None:
        return
    try:
        client.remove_user(full_app_name, username)
    except _API_ERRORS as exc:
        print(exc)
        return
    print("User removed")


def version() -> None:
    """Print the program version."""
    print(VERSION)
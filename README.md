# env0cli

`env0` is a small command-line tool that keeps an application's `.env` files
in sync between collaborators through the Env0 service. You create an app,
push your local environment files, and other users on the app can clone it
and pull the latest values.

## Installation

```
pip install env0cli
```

This puts the `env0` command on your path. The same entry point can also be
run as `python -m env0cli.cli`.

## Getting started

Create an account and log in. The login token is saved to
`$HOME/.env0_cfg/auth.json` and is used by every later command.

```
env0 signup alice alice@example.com password
env0 login alice password
```

Commands that need an account print `Authenticate first` when no token is
stored, and `Authenticate again` when the stored token is empty.

### Starting a new app

From your project directory:

```
env0 init myapp
```

This registers the app on the server and writes `.env0/config.json`, which
records the app's name and owner. If a `.env0` directory already exists,
`init` refuses and tells you to use `clone` instead.

### Pushing and pulling environments

Environment files live in the working directory. `.env` is the default
environment and `.env.<name>` holds the environment called `<name>`, for
example `.env.production`.

```
env0 push                # upload every .env and .env.* file
env0 push production     # upload only .env.production
env0 push default        # upload only .env

env0 pull                # write every remote environment to disk
env0 pull staging        # write only .env.staging
env0 pull default        # write only .env
```

When `push` is given an environment name whose file does not exist, that
environment is sent empty.

Each file holds one `KEY=value` pair per line, split at the first `=`.
Blank lines are ignored; any other line without `=` is an error, and
`env0` stops with a non-zero exit status. Files written by `pull` and
`clone` list their variables sorted by name.

These commands need `.env0/config.json`; without it they print
`App not initialized`.

### Working on an existing app

```
env0 clone alice/myapp
```

`clone` writes one `.env.<name>` file for each remote environment and saves
`.env0/config.json`. It refuses to run if that config file already exists.
The app name must have the form `owner/app`.

### Sharing an app

Give another user access to the app in the current directory, or take it
away:

```
env0 adduser bob
env0 deluser bob
```

### Version

```
env0 version
```

### Errors and exit status

Failures reported by the server are printed (for example
`status 404: app not found`) and the command still exits with status 0.
Wrong arguments, unreadable files and malformed `.env` lines make `env0`
exit with status 1.

## Using it from Python

The HTTP client is `env0cli.client.Client`. It takes a token and, optionally,
a `base_url` for the API. Failed API calls raise `env0cli.client.ClientError`,
which carries the HTTP status in `status` and the server's error message, when
there is one, in `message`. `load_token()` and `save_auth(token)` read and
write the stored token.

```python
from env0cli.client import Client, ClientError, load_token

client = Client(load_token())
try:
    envs = client.get_app("alice/myapp")
except ClientError as exc:
    print(exc)
else:
    for name, variables in envs.items():
        print(name or "default", sorted(variables))
```

The client also offers `signup`, `login`, `create_app`, `update_app`,
`add_user` and `remove_user`.

The helpers `env0cli.commands.parse_env` and `env0cli.commands.format_env`
read and write the `KEY=value` file format.

## What it does not do

There is no logout command, no way to list your apps or their users, and no
way to delete an app. The `.env` format is plain `KEY=value`: comments,
quoting and `export` prefixes are not understood.

## Running the tests

```
pip install -e ".[test]"
pytest
```
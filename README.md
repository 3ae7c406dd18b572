# leaderboard

A small HTTP service for a game leaderboard, built on Flask. Players
register and log in, receive a short-lived JSON Web Token, create matches
and push their scores to a match. Scores pushed for the same player in one
request are added up before they are stored.

## Installation

```
pip install .
```

For running the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

The server reads its settings from the environment. A `.env` file in the
working directory is loaded first, if there is one.

| Variable     | Meaning                                                   |
|--------------|-----------------------------------------------------------|
| `PORT`       | Port to listen on (required)                              |
| `DB_URL`     | SQLite database: `sqlite:///path/to/file.db`, or `sqlite://` / `:memory:` for an in-memory one (required) |
| `JWT_SECRET` | Key used to sign and verify tokens (HS256)                |

A missing `PORT` or `DB_URL`, a `DB_URL` in any other form, or a `PORT`
that is not a number stops the server at start-up with a message.

## Running

```
leaderboard
```

The command takes no options. It serves on all interfaces (`0.0.0.0`) at
`PORT` using Flask's built-in server and logs one line per request with the
method, path, client address and elapsed time.

All routes live under `/v1`:

| Method | Path                            | Token needed | Purpose                          |
|--------|---------------------------------|--------------|----------------------------------|
| GET    | `/v1/healthz`                   | no           | Readiness check, returns `{}`    |
| GET    | `/v1/err`                       | no           | Always answers 400 with an error |
| POST   | `/v1/register`                  | no           | Create a user, returns a token   |
| POST   | `/v1/login`                     | no           | Log in by username or e-mail     |
| GET    | `/v1/users/<username>`          | yes          | Look up a user                   |
| POST   | `/v1/matches`                   | yes          | Create a match                   |
| POST   | `/v1/matches/<match_id>/scores` | yes          | Record scores for a match        |

Protected routes expect a header of the form `Authorization: Bearer token`,
where the second word is a token returned by register or login. Tokens
expire five minutes after they are issued.

Every response carries CORS headers allowing any origin; `OPTIONS`
preflight requests are answered with 204.

### Examples

Register:

```json
{"username": "alice", "email": "alice@example.com", "password": "password"}
```

Log in (the identifier is tried first as a username, then as an e-mail
address):

```json
{"identifier": "alice@example.com", "password": "password"}
```

Both answer with

```json
{"user_details": {"id": 1, "username": "alice", "email": "alice@example.com",
                  "created_at": "...", "updated_at": "..."},
 "token": "..."}
```

Timestamps are RFC 3339; a missing one is shown as `0001-01-01T00:00:00Z`.

Look up a user: `GET /v1/users/alice` answers
`{"user_details": {"id": 1, "username": "alice", "email": "alice@example.com"}}`.

Create a match:

```json
{"match_type": "ranked"}
```

answers `{"match_details": {"match_id": 1}}`.

Push scores:

```json
{"scores": [{"user_id": 1, "score": 40}, {"user_id": 2, "score": 25},
            {"user_id": 1, "score": 10}]}
```

Here user 1 is stored with a score of 50. A player already on the match has
their score replaced; a new one is added. The answer is `{"success": true}`
when every player was stored, 207 with an `errors` list when only some
were, and 500 with an `errors` list when none were. A `match_id` that is not
a 32-bit integer is answered with 400.

Errors are returned as `{"error": "<message>"}` with a matching status
code: 400 for malformed input, 401 for bad credentials or tokens, 404 for an
unknown user or route, 409 when a user or match cannot be created, 500 for
anything unexpected.

## What the package does not do

The package does not create the database tables. The SQLite file named by
`DB_URL` must already hold these tables (SQLite 3.35 or later, for
`RETURNING`):

- `users (id, username, email, password_hash, created_at, updated_at)`
- `matches (id, match_type, match_date, created_at, updated_at)`
- `match_users (match_id, user_id, score)`
- `match_winners (match_id, user_id)`

`id` columns are expected to be assigned by the database. Only SQLite is
supported by the `leaderboard` command; other databases can be used in code
through `Queries` (see below). Match winners can be recorded and read
through `Queries`, but no HTTP route exposes them.

## Library use

- `leaderboard.server.create_app(queries)` builds the Flask application
  with all routes and hooks. `queries` is any object with the methods of
  `Queries`.
- `leaderboard.queries.Queries(connection, paramstyle="qmark", autocommit=True)`
  runs the service's statements over any DB-API 2.0 connection, rendering
  placeholders in the given `paramstyle` (`qmark`, `format`, `numeric`,
  `named` or `pyformat`). Lookups of a single row raise
  `leaderboard.queries.NoRowsError` when nothing matches.
- `leaderboard.api.ApiConfig(db, jwt_key=None)` holds the request handlers;
  without `jwt_key`, `JWT_SECRET` is used.
- `leaderboard.middlewares` has the request hooks: `cors_preflight`,
  `add_cors_headers`, `error_handler`, `authenticate_token` (a view
  decorator that stores the user id in `flask.g.user_id`), `start_timer`
  and `log_request`. `RateLimiter(max_requests=20, expiration=60.0)` is a
  fixed-window limit per client address; it is not installed by
  `create_app`, but can be added with `app.before_request(limiter.check)`,
  after which clients over the limit get 429 with a `Retry-After` header.
- `leaderboard.auth` offers `hash_password`, `check_password_hash`,
  `generate_jwt` and `parse_jwt` (which raises `TokenError` for an invalid
  token). Passwords longer than 72 bytes cannot be hashed.
- `leaderboard.models` and `leaderboard.records` hold the request, response
  and row dataclasses.

A few small containers are included as well:

- `leaderboard.stack.Stack` – last-in, first-out stack with `push`, `pop`
  and `peek`; the latter two raise `IndexError` when it is empty.
- `leaderboard.priority_queue.PriorityQueue` – queue of
  `leaderboard.models.UserScore` values that pops the highest score first.
- `leaderboard.graph.Graph` – directed graph with `add_edge`, `get_edges`
  and `remove_edge`.
- `leaderboard.hashmap.HashMap` – mapping with `set`, `get`, `delete`,
  `items`, `in` and `len()`.
# webcalc

A small distributed calculator made of three commands:

- **`webcalc-orchestrator`** serves a JSON-over-HTTP API. It accepts arithmetic
  expressions, checks them, turns them into reverse Polish notation and evaluates them
  one binary operation at a time. Each operation goes into a queue as a task. The
  orchestrator then waits for an agent to send back the task's result.
- **`webcalc-agent`** runs a pool of worker threads. Each worker polls the orchestrator
  for a task, computes it and posts the result back.
- **`webcalc-frontend`** is a plain static file server for a browser page.

Expressions may use non-negative integers and decimals, `+ - * /` and parentheses.
Unary operators are not supported. Each operator can be given an artificial delay in
milliseconds, so you can watch an expression move from `pending` to `done`.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running

Start the orchestrator:

```
webcalc-orchestrator [--env-file PATH] [--host ADDR] [--port PORT] [--log-level LEVEL]
```

Start one or more agents in other terminals:

```
webcalc-agent [--env-file PATH] [--log-level LEVEL]
```

Serve the browser page:

```
webcalc-frontend [--directory DIR] [--host ADDR] [--port PORT]
```

The frontend serves `./frontend` on port 8081 by default. It serves whatever files are in
that directory.

The orchestrator and the agent write JSON log lines to stderr. `--log-level` takes one of
`DEBUG`, `INFO`, `WARNING`, `ERROR` or `CRITICAL`; the default is `INFO`. Stop either
command with Ctrl-C.

## Settings

Both the orchestrator and the agent read settings from the process environment and from
a `.env` file, which is `../.env` unless `--env-file` names another. A value in the file
wins over the same variable in the environment. If the file is missing, only the
environment is used. A setting that should be an integer but is not, or that is out of
range, makes the command exit with status 1.

Orchestrator:

| Variable                              | Default     | Meaning                                     |
|---------------------------------------|-------------|---------------------------------------------|
| `ORCHESTRATOR_HOST`                   | `localhost` | host name                                   |
| `ORCHESTRATOR_PORT`                   | `5432`      | port to listen on (`--port` overrides it)   |
| `ORCHESTRATOR_TIME_ADDITION_MS`       | `0`         | delay of `+`                                |
| `ORCHESTRATOR_TIME_SUBTRACTION_MS`    | `0`         | delay of `-`                                |
| `ORCHESTRATOR_TIME_MULTIPLICATIONS_MS`| `0`         | delay of `*`                                |
| `ORCHESTRATOR_TIME_DIVISIONS_MS`      | `0`         | delay of `/`                                |

The orchestrator also reads `POSTGRES_HOST`, `POSTGRES_PORT`, `POSTGRES_USER`,
`POSTGRES_PASSWORD`, `POSTGRES_DB`, `POSTGRES_MAX_CONNS` and `POSTGRES_MIN_CONNS` into
`webcalc.config.PostgresConfig`. Nothing uses them to connect (see below).

Agent:

| Variable                        | Default     | Meaning                                          |
|---------------------------------|-------------|--------------------------------------------------|
| `ORCHESTRATOR_HOST`             | `localhost` | where the orchestrator is                        |
| `ORCHESTRATOR_PORT`             | `50052`     | the orchestrator's port                          |
| `ORCHESTRATOR_TIMEOUT_MS`       | `500`       | timeout of each HTTP request                     |
| `ORCHESTRATOR_MAX_RETRIES`      | `3`         | retries after a failed request                   |
| `ORCHESTRATOR_BASE_RETRY_DELAY` | `100`       | base retry delay in seconds, doubled per attempt |
| `AGENT_HOST`                    | `localhost` | host name                                        |
| `AGENT_PORT`                    | `50051`     | port                                             |
| `AGENT_COMPUTING_POWER`         | `5`         | number of worker threads                         |
| `AGENT_WAIT_TIME_MS`            | `500`       | pause between polls                              |

The orchestrator's default port and the agent's default orchestrator port differ. Set
`ORCHESTRATOR_PORT` to the same value for both commands, or start the orchestrator with
`--port`.

## HTTP API

| Method | Path                        | Purpose                                                  |
|--------|-----------------------------|----------------------------------------------------------|
| POST   | `/api/v1/calculate`         | submit `{"expression": "..."}`; replies 201 `{"id": n}`  |
| GET    | `/api/v1/expressions`       | `{"expressions": [...]}`, ordered by id                  |
| GET    | `/api/v1/expressions/{id}`  | one expression                                           |
| GET    | `/internal/task`            | an agent takes the oldest waiting task                   |
| POST   | `/internal/task`            | an agent posts `{"expression_id": e, "id": t, "result": r}` |

- **Expressions.** An expression is `{"id": n, "status": s}` plus `"result"` once it is
  done. The status is one of `pending`, `done` or `invalid expression`.
- **Tasks.** A task is `{"expression_id", "id", "arg1", "arg2", "operation",
  "operation_time"}`, with `operation_time` in nanoseconds.
- **Posting a result.** A posted result is answered with `"task completed"`.
- **Errors and other replies.**
  - A malformed body or expression gets 422.
  - An unknown expression id gets 404, and a non-integer id gets 500.
  - `GET /internal/task` gets 404 when no task is waiting.
  - A result for an unknown expression gets 404.
  - An unknown path gets 404 and a wrong method gets 405.
  - Every reply carries permissive CORS headers, and `OPTIONS` gets 204.

## Using the library

The parsing helpers can be used on their own:

```python
from webcalc.rpn import to_rpn, validate_expression
from webcalc.errors import InvalidExpressionError, DivideByZeroError

to_rpn("3+4*2/(1-5)")
# ['3', '4', '2', '*', '1', '5', '-', '/', '+']

try:
    validate_expression("2+-2")
except InvalidExpressionError:
    ...

try:
    validate_expression("2/0")
except DivideByZeroError:
    ...
```

`validate_expression` raises `DivideByZeroError` only when the expression ends by dividing
by zero. `to_rpn` turns every validation failure into `InvalidExpressionError`.

All errors derive from `webcalc.errors.CalculatorError`. The others are
`TaskNotFoundError`, `ExpressionNotFoundError` and `InternalServerError`.

### Orchestrator side

- `webcalc.managers.ExpressionManager` and `webcalc.managers.TaskManager` keep the
  expressions and the task queue.
- `webcalc.processor.process` evaluates an RPN token list through tasks.
- `webcalc.service.OrchestratorService` offers `calculate`, `expressions`,
  `expression_by_id`, `result_task` and `get_task`.
- `webcalc.api.OrchestratorApi.handle(method, path, body)` answers one request as an
  `ApiResponse`.
- `webcalc.api.make_server` and `webcalc.api.serve` put that API behind an HTTP server.
- `webcalc.orchestrator_cli.build_service` builds the service from loaded settings.

### Agent side

- `webcalc.agent.AgentService` runs the work loop against any
  `webcalc.agent.OrchestratorPort`.
- `webcalc.agent.do_task` computes a single task, and `webcalc.agent.run_workers` runs the
  worker threads.
- `webcalc.client.HttpOrchestratorClient` is the HTTP implementation of the port.
- `webcalc.agent_cli.build_agent` wires an agent from loaded settings.

### Shared helpers

- `webcalc.callers.retry` repeats an operation with exponential back-off.
- `webcalc.callers.timeout` runs an operation with a time limit.
- `webcalc.config.load_orchestrator_settings` and `webcalc.config.load_agent_settings`
  read the settings.
- `webcalc.logger` provides `configure_logging`, `get_logger`, `request_context` and
  `current_request_id`.

## What it does not do

- **No storage.** Expressions and tasks live in the orchestrator's memory and are lost
  when it stops. The PostgreSQL settings are read, and `PostgresConfig.conn_string()`
  builds a URL, but nothing connects to a database.
- **No browser page.** The package ships no page for `webcalc-frontend`; you supply the
  files in the directory it serves.
- **Failed tasks are not reported.** If an agent cannot compute a task, for example a
  division by zero in the middle of an expression, it drops the task. That expression
  stays `pending`.
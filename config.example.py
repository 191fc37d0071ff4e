# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Nothing here is secret; the remote endpoint is public by default.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory (default: .local/todo).",
    "TODO_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TODO_LOG_DIR": "Directory for todo.log (default: <data_dir>).",
    # Remote task source
    "TODO_REMOTE_ENABLED": "Fetch tasks from the remote endpoint on first load (true/false).",
    "TODO_REMOTE_URL": "Remote list endpoint (default: https://dummyjson.com/todos).",
    "TODO_REMOTE_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    "TODO_REMOTE_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 15).",
    # Reconciler policy
    "TODO_DEFAULT_OWNER_ID": "Owner id stamped on locally created tasks (default: 1).",
    "TODO_REIMPORT_WHEN_EMPTY": (
        "Re-import remote tasks whenever the store is empty, even after a previous import "
        "(default: true)."
    ),
    # Connectors
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false).",
}

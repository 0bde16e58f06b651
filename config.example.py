# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todo-titans).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Backend
    "TODO_BACKEND": "firebase | memory (default: firebase when an API key is set, else memory).",
    "TODO_FIREBASE_API_KEY": "Web API key of the Firebase project.",
    "TODO_FIREBASE_DATABASE_URL": "Realtime Database URL, e.g. https://<project>-default-rtdb.firebaseio.com",
    "TODO_AUTH_BASE_URL": "Identity Toolkit base URL (default: https://identitytoolkit.googleapis.com/v1).",
    "TODO_TOKEN_BASE_URL": "Secure Token base URL (default: https://securetoken.googleapis.com/v1).",
    "TODO_HTTP_TIMEOUT_SECONDS": "Per-request timeout for REST calls (default: 15).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory for logs and the session (default: .local/todo).",
    "TODO_SESSION_PATH": "Persisted sign-in session (default: <data_dir>/session.json).",
    # Home screen
    "TODO_STRIP_DAYS": "Number of days in the home date strip (default: 7).",
}

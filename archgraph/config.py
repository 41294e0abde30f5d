"""Application-wide configuration and settings.

Uses ``pydantic-settings`` so values can be overridden via environment
variables prefixed with ``ARCHGRAPH_``.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Global settings for the archgraph analysis engine.

    Attributes:
        app_name: Display name of the application.
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Render log events as JSON lines instead of console text.
        default_blacklist: Directory/file patterns to skip during crawling.
        max_file_size_bytes: Skip files larger than this threshold.
        source_extensions: File suffixes handed to the TypeScript parser.
        alias_config_files: Project config files searched (in order) for
            ``compilerOptions.paths`` import aliases.
        default_neighbor_depth: BFS depth used by neighbors mode when the
            caller does not give one.
        cors_origins: Origins allowed to call the HTTP API.
    """

    app_name: str = "archgraph"
    log_level: str = "INFO"
    json_logs: bool = False
    default_blacklist: list[str] = [
        ".git",
        "node_modules",
        "dist",
        "build",
        "out",
        "coverage",
        ".next",
        ".nuxt",
        ".turbo",
        ".cache",
        "__pycache__",
        "venv",
        ".venv",
        "*.d.ts",
        "*.min.js",
    ]
    max_file_size_bytes: int = 1_048_576  # 1 MB
    source_extensions: list[str] = [".ts", ".tsx", ".js", ".jsx", ".mts", ".cts"]

    alias_config_files: list[str] = ["tsconfig.json", "jsconfig.json"]

    default_neighbor_depth: int = 1

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    model_config = {"env_prefix": "ARCHGRAPH_", "env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()

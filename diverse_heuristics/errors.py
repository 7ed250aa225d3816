"""Exception types shared across the package."""


class ConfigError(ValueError):
    """Invalid or inconsistent run configuration (YAML or CLI)."""


class ResultWriteError(RuntimeError):
    """Result data could not be persisted to the output sink."""


class SearchStateError(RuntimeError):
    """Search engine queried in a state where the answer is undefined."""

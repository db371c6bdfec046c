class DashboardError(Exception):
    """Base exception for sqldash."""

class ExecutionError(DashboardError):
    """A statement could not be executed against a data source."""

class ConnectionError(ExecutionError):
    """A session with the data source could not be established."""

class UnsupportedConnectionTypeError(ExecutionError):
    pass

class ConnectionNotFoundError(DashboardError):
    pass

class StoreError(DashboardError):
    pass

class RenderError(DashboardError):
    pass

class ConfigError(DashboardError):
    pass

"""Error taxonomy shared by the dashboard core."""


class LntopError(Exception):
    pass


class DataSourceError(LntopError):
    """A call to the node failed (network, auth or node-reported error)."""

    def __init__(self, operation: str, cause: object) -> None:
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause


class IndexOutOfRange(LntopError, IndexError):
    """Navigation referenced a row that is not present in the loaded data."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"channel index {index} out of range ({length} loaded)")
        self.index = index
        self.length = length


class ConfigError(LntopError):
    pass


class BindingSetupError(LntopError):
    pass

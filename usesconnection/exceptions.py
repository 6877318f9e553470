class UsesConnectionError(Exception):
    pass


class ConfigurationError(UsesConnectionError, ValueError):
    pass


class ConnectionNotRegistered(UsesConnectionError, KeyError):
    def __init__(self, alias: str, registered: list):
        self.alias = alias
        self.registered = registered

    def __str__(self):
        return f"connection `{self.alias}` is not registered, registered connections: {self.registered}"

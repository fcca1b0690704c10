class RequestLoggerError(Exception):
    pass


class ConfigurationError(RequestLoggerError, TypeError):
    pass


class SinkNotCallableError(ConfigurationError):
    def __init__(self, sink: object):
        super().__init__("Expected a function")
        self.sink = sink

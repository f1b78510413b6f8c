"""Exception types for smart-validator."""


class InfrastructureError(RuntimeError):
    """An external tool could not be run at all.

    Distinct from the tool reporting diagnostics: this aborts the current run.
    """

    def __init__(self, command: list[str], reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run {' '.join(command)}: {reason}")


class ConfigError(ValueError):
    pass

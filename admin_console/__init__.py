from .console import AdminConsole

__all__ = ["AdminConsole"]

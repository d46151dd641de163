class PropmatchError(Exception):
    """Base exception for setup and programming errors in propmatch"""
    pass


class ConfigurationError(PropmatchError):
    """Raised when the matching configuration cannot be used"""
    pass


class ProfileRepositoryError(PropmatchError):
    """Raised when a profile storage backend cannot be created"""
    pass

from .state import CredentialNotFoundError, CredentialStore, KeyLoadError

__all__ = ["CredentialNotFoundError", "CredentialStore", "KeyLoadError"]

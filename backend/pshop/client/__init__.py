from .api_client import ApiClient, ApiClientError
from .session import ClientSession
from .stores import DataStore, LocalStore, RemoteStore, open_store

__all__ = [
    'ApiClient', 'ApiClientError',
    'ClientSession',
    'DataStore', 'LocalStore', 'RemoteStore', 'open_store',
]

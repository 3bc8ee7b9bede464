"""Remote JSON store infrastructure module"""
from .client import RemoteStoreClient, StoreError, get_store_client, reset_store_client

__all__ = ['RemoteStoreClient', 'StoreError', 'get_store_client', 'reset_store_client']

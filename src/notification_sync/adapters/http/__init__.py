"""HTTP adapter – httpx-backed notification REST client."""
from notification_sync.adapters.http.client import HttpxHttpClient
from notification_sync.adapters.http.notifications_api import HttpNotificationApi

__all__ = ["HttpNotificationApi", "HttpxHttpClient"]

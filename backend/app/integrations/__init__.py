"""Integration shortcuts."""

from .fcm_client import DeliveryResult, FCMClient, FCMClientError

__all__ = ["DeliveryResult", "FCMClient", "FCMClientError"]

"""Push delivery adapters for the infrastructure layer."""

from .base import (
    DeliveryAdapter,
    ProviderConfigurationError,
    ProviderRequestError,
    mask_token,
)
from .expo import EXPO_MAX_MESSAGES_PER_REQUEST, EXPO_PUSH_API_URL, ExpoPushAdapter
from .fcm import FCM_MAX_TOKENS_PER_MULTICAST, FcmPushAdapter
from .firebase import FirebaseAppStatus, build_firebase_app, close_firebase_app

__all__ = [
    "DeliveryAdapter",
    "ProviderConfigurationError",
    "ProviderRequestError",
    "mask_token",
    "ExpoPushAdapter",
    "EXPO_PUSH_API_URL",
    "EXPO_MAX_MESSAGES_PER_REQUEST",
    "FcmPushAdapter",
    "FCM_MAX_TOKENS_PER_MULTICAST",
    "FirebaseAppStatus",
    "build_firebase_app",
    "close_firebase_app",
]

from .messaging_provider import (
    CloudAPIProvider,
    MessagingProvider,
    WhatsAppClientError,
    build_body_components,
)

__all__ = [
    "CloudAPIProvider",
    "MessagingProvider",
    "WhatsAppClientError",
    "build_body_components",
]

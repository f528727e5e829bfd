"""Docker Registry v2 client and credential lookup."""

from uptix.registry.auth import Challenge, Credentials, find_credentials, parse_challenge
from uptix.registry.client import ImageInfo, RegistryClient

__all__ = [
    "Challenge",
    "Credentials",
    "ImageInfo",
    "RegistryClient",
    "find_credentials",
    "parse_challenge",
]

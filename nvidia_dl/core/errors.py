from __future__ import annotations
from typing import Union


class DriverError(Exception):
    """Base for everything the downloader core raises on purpose."""


class InvalidCombination(DriverError):
    """Descriptor can't be turned into candidate links."""


class Unreachable(DriverError):
    def __init__(self, status: Union[int, str], url: str = ""):
        self.status = status
        self.url = url
        msg = f"{url}: {status}" if url else str(status)
        super().__init__(msg)


class CatalogUnavailable(DriverError):
    """GPU list could not be fetched or parsed."""

"""HTTP access to the remote model catalog and model archives."""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import requests

from .config_paths import get_catalog_url
from .errors import DescriptorParseError, NetworkError
from .logging import LogEvent, get_logger, log_debug, log_error

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30


def decode_catalog(content: Union[bytes, str]) -> Dict[str, Any]:
    """Decode a downloaded catalog document.

    Args:
        content: Raw response body

    Returns:
        The decoded JSON object

    Raises:
        DescriptorParseError: If the body is not a JSON object
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DescriptorParseError(f"Remote catalog is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise DescriptorParseError(f"Remote catalog is not a JSON object, got {type(data).__name__}")
    return data


class CatalogClient:
    """Fetches the model catalog and model archives over HTTP."""

    def __init__(
        self,
        url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            url: Catalog URL, defaults to ``TMR_CATALOG_URL`` or the public catalog
            session: HTTP session to use, a new one is created if None
            timeout: Per-request timeout in seconds
        """
        self.url = get_catalog_url(url)
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_catalog(self) -> Dict[str, Any]:
        """Download and decode the catalog.

        Returns:
            The decoded catalog document

        Raises:
            NetworkError: If the request fails
            DescriptorParseError: If the response is not a JSON object
        """
        log_debug(LogEvent.CATALOG_FETCH, f"Fetching model catalog from {self.url}")
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            try:
                response.raise_for_status()
                content = response.content
            finally:
                # Ensure response is closed to prevent resource leaks
                response.close()
        except requests.RequestException as e:
            log_error(LogEvent.CATALOG_FETCH, f"Failed to fetch model catalog: {e}", url=self.url)
            raise NetworkError(f"Failed to fetch model catalog: {e}", url=self.url) from e

        return decode_catalog(content)

    def download_archive(self, url: str, target_path: Path) -> Path:
        """Download a model archive to ``target_path``.

        Args:
            url: Download location of the archive
            target_path: File to write

        Returns:
            ``target_path``

        Raises:
            NetworkError: If the download fails
        """
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            try:
                response.raise_for_status()
                with open(target_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=8192):
                        f.write(chunk)
            finally:
                response.close()
        except requests.RequestException as e:
            log_error(LogEvent.CATALOG_FETCH, f"Failed to download {url}: {e}", url=url)
            raise NetworkError(f"Failed to download {url}: {e}", url=url) from e
        except OSError as e:
            log_error(LogEvent.CATALOG_FETCH, f"Failed to write file {target_path}: {e}")
            raise NetworkError(f"Failed to write file {target_path}: {e}", url=url) from e

        if hasattr(os, "chmod"):
            os.chmod(target_path, 0o644)
        return target_path

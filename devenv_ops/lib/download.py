"""HTTP downloads for SDK archives."""

import logging
from pathlib import Path

import httpx

from .exceptions import DevEnvError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
RETRIES = 5


def download_file(url: str, dest: Path, client: httpx.Client | None = None) -> Path:
    """Stream url into dest, following redirects.

    A partial file is removed when the download fails.

    Args:
        url: Archive URL
        dest: Output file (parent must exist)
        client: HTTP client (a client with connect retries is created if None)

    Returns:
        dest

    Raises:
        DevEnvError: On a non-200 response or a transport error
    """
    owns_client = client is None
    if client is None:
        client = httpx.Client(transport=httpx.HTTPTransport(retries=RETRIES))

    logger.info("Downloading %s", url)
    try:
        with client.stream("GET", url, timeout=60, follow_redirects=True) as response:
            if response.status_code != 200:
                raise DevEnvError(
                    f"download failed with HTTP {response.status_code}: {url}",
                    hint="Check the network connection and that the version exists.",
                )
            with dest.open("wb") as handle:
                for chunk in response.iter_bytes(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)
    except httpx.HTTPError as e:
        dest.unlink(missing_ok=True)
        raise DevEnvError(f"download failed: {url}: {e}") from e
    except DevEnvError:
        dest.unlink(missing_ok=True)
        raise
    finally:
        if owns_client:
            client.close()

    logger.info("Downloaded %s (%d bytes)", dest.name, dest.stat().st_size)
    return dest

import logging

import httpx

import dm_assistant.config.config as configs

logger = logging.getLogger(__name__)
file_client = httpx.AsyncClient(timeout=configs.FILE_FETCH_TIMEOUT, follow_redirects=True)


class FileFetchError(Exception):
    pass


async def fetch_file(file_url: str) -> bytes:
    logger.info("fetching file url=%s", file_url)
    try:
        response = await file_client.get(file_url)
    except httpx.RequestError as exc:
        raise FileFetchError(f"Failed to fetch file: {exc}") from exc
    if not response.is_success:
        raise FileFetchError(f"Failed to fetch file: {response.status_code}")
    return response.content


async def close_clients() -> None:
    await file_client.aclose()

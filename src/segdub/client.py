"""
OpenAI client construction and SDK error translation.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import httpx
import openai
from openai import OpenAI

from .config import Credential
from .errors import MissingCredential, ServiceCallFailed

logger = logging.getLogger("segdub")


def make_openai_client(credential: Credential, timeout: float = 120.0) -> OpenAI:
    """Client bound to one run's credential; retries are left to the caller."""
    if not credential:
        raise MissingCredential("OpenAI API key is not set. Put it in .env or environment.")
    return OpenAI(
        api_key=credential.token,
        max_retries=0,
        timeout=httpx.Timeout(timeout, connect=10.0),
    )


@contextmanager
def service_errors(
    error: type[ServiceCallFailed], chunk_index: int | None = None
) -> Iterator[None]:
    """Re-raise SDK failures as ``error`` carrying the HTTP status."""
    try:
        yield
    except openai.APIStatusError as e:
        logger.error(f"{error.service} request rejected ({e.status_code}): {e.message}")
        raise error(e.status_code, e.message, chunk_index=chunk_index) from e
    except openai.APIConnectionError as e:
        logger.error(f"{error.service} request did not complete: {e}")
        raise error(None, str(e), chunk_index=chunk_index) from e

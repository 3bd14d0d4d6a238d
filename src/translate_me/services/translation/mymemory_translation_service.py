"""MyMemory Translation Service - translation via the public MyMemory REST API."""

import json
import logging
from typing import Optional
from urllib.parse import quote, urlencode

import requests

from translate_me.core import (
    DecodingError,
    EmptyResponseError,
    EncodingError,
    LoadingFlag,
    NetworkError,
    TranslationError,
)
from translate_me.services.translation.translation_service import TranslationResult, TranslationService

logger = logging.getLogger(__name__)


class MyMemoryTranslationService(TranslationService):
    """
    Translation service using the MyMemory ``/get`` endpoint.

    Issues a single GET per call with no retry and no caching. The shared
    loading flag is raised for the whole call and released on every exit
    path.

    A 4xx or 5xx status is reported as a ``NetworkError`` without reading
    the body, even when the body is JSON. Only 2xx bodies are decoded, so
    ``DecodingError`` always means a successful response of the wrong shape.
    """

    PROVIDER_NAME = "mymemory"
    ENDPOINT = "https://api.mymemory.translated.net/get"

    def __init__(
        self,
        loading_flag: Optional[LoadingFlag] = None,
        session: Optional[requests.Session] = None,
        email: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            loading_flag: Busy indicator to raise during calls.
            session: HTTP session; a new one is created if omitted.
            email: Contact address sent as ``de`` for a larger free quota.
            timeout: Request timeout in seconds; None keeps requests' default.
        """
        self.loading_flag = loading_flag if loading_flag is not None else LoadingFlag()
        self._session = session if session is not None else requests.Session()
        self._email = email
        self._timeout = timeout

    def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        if not text:
            raise ValueError("Text to translate must not be empty")

        with self.loading_flag.active():
            try:
                url = self.build_url(text, source_lang, target_lang)
                logger.debug("Translating text: %r (%s|%s)", text, source_lang, target_lang)
                body = self._fetch(url)
                translated = self.decode_response(body)
            except TranslationError as e:
                logger.error("Translation failed (%s): %s", type(e).__name__, e)
                return TranslationResult(text="", provider=self.PROVIDER_NAME, error=e)

        logger.info("Translation successful: %r", translated)
        return TranslationResult(text=translated, provider=self.PROVIDER_NAME)

    def build_url(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Build the request URL with percent-encoded query parameters.

        Raises:
            EncodingError: If the text is not encodable as UTF-8.
        """
        params = {"q": text, "langpair": f"{source_lang}|{target_lang}"}
        if self._email:
            params["de"] = self._email
        try:
            query = urlencode(params, quote_via=quote)
        except UnicodeEncodeError as e:
            raise EncodingError(f"Invalid text: {e.reason}") from e
        return f"{self.ENDPOINT}?{query}"

    def _fetch(self, url: str) -> bytes:
        try:
            response = self._session.get(url, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Translation request failed: {e}", cause=e) from e
        return response.content

    @staticmethod
    def decode_response(body: Optional[bytes]) -> str:
        """
        Extract ``responseData.translatedText`` from a response body.

        Raises:
            EmptyResponseError: If the body is empty.
            DecodingError: If the body is not the expected JSON envelope.
        """
        if not body:
            raise EmptyResponseError("No data received from translation API")

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise DecodingError(f"Response is not valid JSON: {e}") from e

        try:
            translated = payload["responseData"]["translatedText"]
        except (KeyError, TypeError) as e:
            raise DecodingError("Response is missing responseData.translatedText") from e

        if not isinstance(translated, str):
            raise DecodingError("responseData.translatedText is not a string")
        return translated

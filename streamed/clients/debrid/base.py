import logging
from abc import ABC, abstractmethod
from json.decoder import JSONDecodeError
from typing import Any, Dict, Optional

import requests

from streamed.clients.exceptions import (
    AuthError,
    NetworkError,
    NotFoundError,
    ProviderException,
    RateLimitError,
)
from streamed.utils.logger import streamlog


class DebridClient(ABC):
    """
    Abstract base class for Debrid service clients.
    Handles HTTP requests, error mapping, and session management.
    """

    def __init__(
        self, token: str, timeout: int = 15, session: Optional[requests.Session] = None
    ):
        """
        Args:
            token (str): API token for authentication.
            timeout (int): Request timeout in seconds.
            session (requests.Session, optional): Custom session for requests.
        """
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {}
        self.initialize_headers()

    def _make_request(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        is_return_none: bool = False,
        is_expected_to_fail: bool = False,
    ) -> Dict[str, Any]:
        """
        Make an HTTP request and handle errors.
        """
        response = self._perform_request(method, url, data, params, json)
        self._handle_errors(response, is_expected_to_fail)
        return self._parse_response(response, is_return_none)

    def _perform_request(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        try:
            return self.session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                json=json,
                headers=self.headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            streamlog(f"Timeout: {e}", level=logging.WARNING)
            raise NetworkError("Request timed out.")
        except requests.exceptions.ConnectionError as e:
            streamlog(f"ConnectionError: {e}", level=logging.WARNING)
            raise NetworkError(f"Connection failed: {e}")
        except requests.exceptions.RequestException as e:
            streamlog(f"RequestException: {e}", level=logging.WARNING)
            raise NetworkError(f"Request failed: {str(e)}")

    def _handle_errors(
        self, response: requests.Response, is_expected_to_fail: bool
    ) -> None:
        """
        Map HTTP errors onto the provider exception types.
        """
        status_code = response.status_code
        if status_code < 400 or is_expected_to_fail:
            return

        error_content = self._error_content(response)

        # Service specific codes are more precise than the status
        if isinstance(error_content, dict):
            self._handle_service_specific_errors(error_content, status_code)

        if status_code in (401, 403):
            raise AuthError("Invalid token", status_code, error_content)
        elif status_code == 404:
            raise NotFoundError("Not found", status_code, error_content)
        elif status_code == 429:
            raise RateLimitError("Too many requests", status_code, error_content)
        elif status_code >= 500:
            raise ProviderException("Internal server error", status_code, error_content)
        raise ProviderException(
            f"API Error: {status_code} for {response.url}",
            status_code,
            error_content,
        )

    @staticmethod
    def _error_content(response: requests.Response) -> Any:
        content_type = response.headers.get("Content-Type", "")
        if content_type.startswith("application/json"):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    @abstractmethod
    def initialize_headers(self) -> None:
        """
        Initialize headers for requests. Must be implemented by subclasses.
        """
        raise NotImplementedError

    @staticmethod
    def _parse_response(
        response: requests.Response, is_return_none: bool
    ) -> Dict[str, Any]:
        if is_return_none:
            return {}
        try:
            return response.json()
        except (JSONDecodeError, ValueError) as error:
            raise ProviderException(
                f"Failed to parse response error: {error}. \nresponse: {response.text}"
            )

    @abstractmethod
    def _handle_service_specific_errors(
        self, error_data: dict, status_code: int
    ) -> None:
        """
        Service specific errors on api requests. Must be implemented by subclasses.
        """
        raise NotImplementedError

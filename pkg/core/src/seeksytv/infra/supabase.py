"""
HTTP client for the hosted backend.

The watch page talks to two remote surfaces of the same project: edge
functions (``/functions/v1/<name>``) for ad decisioning and telemetry, and the
PostgREST endpoint (``/rest/v1/<table>``) for catalog rows. Both are reached
through :class:`SupabaseClient`; every transport or decoding failure is
wrapped in :class:`FunctionInvocationError`.
"""

from __future__ import annotations

from typing import Any, Protocol

import requests
from requests.adapters import HTTPAdapter

from .exceptions import FunctionInvocationError


class FunctionClient(Protocol):
    """What the runtime needs from a remote backend."""

    def invoke(self, function_name: str, body: dict[str, Any]) -> dict[str, Any]:
        ...

    def functions_url(self, function_name: str) -> str:
        ...


class SupabaseClient:
    """Edge-function and REST client for a hosted Supabase project."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Project URL (e.g., "https://abc.supabase.co")
            api_key: Anonymous (public) API key
            timeout: Per-request timeout in seconds
            session: Optional pre-built requests session (tests inject one)
        """
        # Be resilient to accidental whitespace/newlines
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = api_key.strip()
        self.timeout = timeout
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with the project auth headers."""
        session = requests.Session()

        # Telemetry is best-effort and ad resolution runs once per load: no retries
        adapter = HTTPAdapter(max_retries=0)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update(
            {
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )
        return session

    def functions_url(self, function_name: str) -> str:
        return f"{self.base_url}/functions/v1/{function_name}"

    def rest_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def invoke(self, function_name: str, body: dict[str, Any]) -> dict[str, Any]:
        """
        POST a JSON body to an edge function.

        Returns:
            Decoded JSON object, or an empty dict for an empty body

        Raises:
            FunctionInvocationError: If the request fails or the body is not JSON
        """
        url = self.functions_url(function_name)
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            if not response.content:
                return {}
            data = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FunctionInvocationError(
                f"Function {function_name} failed: {e}", function_name, status
            ) from e
        except ValueError as e:
            raise FunctionInvocationError(
                f"Function {function_name} returned invalid JSON", function_name
            ) from e
        except requests.RequestException as e:
            raise FunctionInvocationError(f"Function {function_name} unreachable: {e}", function_name) from e

        if not isinstance(data, dict):
            raise FunctionInvocationError(
                f"Function {function_name} returned {type(data).__name__}, expected object",
                function_name,
            )
        return data

    def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """
        Run a PostgREST select.

        Args:
            table: Table name
            params: PostgREST query parameters (``select``, ``id=eq.<v>``, ...)

        Raises:
            FunctionInvocationError: If the request fails
        """
        url = self.rest_url(table)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FunctionInvocationError(f"Select on {table} failed: {e}", table, status) from e
        except ValueError as e:
            raise FunctionInvocationError(f"Select on {table} returned invalid JSON", table) from e
        except requests.RequestException as e:
            raise FunctionInvocationError(f"Select on {table} unreachable: {e}", table) from e

        if not isinstance(rows, list):
            raise FunctionInvocationError(f"Select on {table} did not return rows", table)
        return rows

    def close(self) -> None:
        self.session.close()


class RecordingFunctionClient:
    """
    In-process stand-in for the edge functions.

    Records every invocation and answers from ``responses`` (keyed by function
    name). Functions listed in ``failures`` raise FunctionInvocationError.
    Functions listed in ``delegated`` are forwarded to ``delegate`` (and still
    recorded), so a run can reach the real ad-decision service while keeping
    telemetry local.
    Used by ``seeksytv watch --no-telemetry`` and throughout the test suite.
    """

    def __init__(
        self,
        responses: dict[str, dict[str, Any]] | None = None,
        failures: set[str] | None = None,
        base_url: str = "https://seeksy.local",
        delegate: FunctionClient | None = None,
        delegated: set[str] | None = None,
    ):
        self.responses = dict(responses or {})
        self.failures = set(failures or ())
        self.base_url = base_url.rstrip("/")
        self.delegate = delegate
        self.delegated = set(delegated or ())
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def functions_url(self, function_name: str) -> str:
        if self.delegate is not None:
            return self.delegate.functions_url(function_name)
        return f"{self.base_url}/functions/v1/{function_name}"

    def invoke(self, function_name: str, body: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((function_name, dict(body)))
        if self.delegate is not None and function_name in self.delegated:
            return self.delegate.invoke(function_name, body)
        if function_name in self.failures:
            raise FunctionInvocationError(f"Function {function_name} failed", function_name, 500)
        return dict(self.responses.get(function_name, {}))

    def bodies(self, function_name: str) -> list[dict[str, Any]]:
        """Bodies sent to one function, in call order."""
        return [body for name, body in self.calls if name == function_name]

# umrah_core/editor_client.py
from typing import Optional
from urllib.parse import quote

import requests

from umrah_core.errors import EditorClientError
from umrah_core.models import Violation, WriteResult
from umrah_core.version import VERSION


class EditorClient:
    """Talks to a running data editor (see editor_server)."""

    def __init__(self, base_url: str = "http://127.0.0.1:4000", timeout: float = 10,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": f"UmrahGuideEditorClient/{VERSION}"})

    def _url(self, *parts: str) -> str:
        return self.base_url + '/api/' + '/'.join(quote(p, safe='') for p in parts)

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise EditorClientError(f"{method} {url} failed: {e}") from e

    def _json_or_raise(self, response: requests.Response):
        if response.status_code != 200:
            raise EditorClientError(self._error_text(response), response.status_code)
        return response.json()

    @staticmethod
    def _error_text(response: requests.Response) -> str:
        try:
            return response.json().get("error", response.reason)
        except ValueError:
            return f"HTTP {response.status_code}: {response.reason}"

    def _write_result(self, response: requests.Response) -> WriteResult:
        if response.status_code == 200:
            return WriteResult(ok=True)
        if response.status_code == 400:
            payload = response.json()
            if "details" in payload:
                return WriteResult(ok=False, violations=[Violation(**d) for d in payload["details"]])
        raise EditorClientError(self._error_text(response), response.status_code)

    def get_document(self, file_key: str) -> dict:
        return self._json_or_raise(self._request('GET', self._url('data', file_key)))

    def get_schema(self, file_key: str) -> dict:
        return self._json_or_raise(self._request('GET', self._url('schema', file_key)))

    def save_document(self, file_key: str, document) -> WriteResult:
        return self._write_result(self._request('POST', self._url('data', file_key), json=document))

    def upsert_entry(self, file_key: str, entry_id: str, fields: dict) -> WriteResult:
        return self._write_result(self._request('PUT', self._url('data', file_key, entry_id), json=fields))

    def delete_entry(self, file_key: str, entry_id: str) -> WriteResult:
        return self._write_result(self._request('DELETE', self._url('data', file_key, entry_id)))

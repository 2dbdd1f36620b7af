# stacksprint/core/generation_client.py
import logging
from typing import Any, Dict, Optional, Union

import requests
from pydantic import ValidationError

from stacksprint.models import GenerationRequest, GenerationResult
from stacksprint.utils.config import API_BASE, DEBUG, LOG_DIR, REQUEST_TIMEOUT
from stacksprint.utils.file_helpers import _save_debug_log

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Generation failed"


class GenerationError(Exception):
    """Non-cancellation failure of a /generate call (transport, status or body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GenerationClient:
    """
    Blocking client for POST {API_BASE}/generate.

    Every failure mode is converted into GenerationError so callers only have
    one thing to catch. The call cannot be aborted mid-flight; callers that
    supersede a request simply ignore its result.
    """

    def __init__(self,
                 api_base: str = API_BASE,
                 timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 debug: bool = DEBUG,
                 log_dir: str = LOG_DIR):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.debug = debug
        self.log_dir = log_dir

    @property
    def url(self) -> str:
        return f"{self.api_base}/generate"

    def generate(self, payload: Union[GenerationRequest, Dict[str, Any]]) -> GenerationResult:
        body = payload.model_dump(mode="json") if isinstance(payload, GenerationRequest) else payload
        if self.debug:
            _save_debug_log("generate_outgoing", body, self.log_dir)

        try:
            resp = self.session.post(
                self.url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Generation request to %s failed: %s", self.url, e)
            raise GenerationError(str(e)) from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not (200 <= resp.status_code < 300):
            message = GENERIC_FAILURE
            if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"].strip():
                message = data["error"]
            logger.warning("Generation service returned %s: %s", resp.status_code, message)
            self._dump_failure(resp.status_code, data, resp)
            raise GenerationError(message, status_code=resp.status_code)

        if not isinstance(data, dict):
            self._dump_failure(resp.status_code, data, resp)
            raise GenerationError("Malformed response from generation service", status_code=resp.status_code)

        try:
            return GenerationResult.model_validate(data)
        except ValidationError as e:
            self._dump_failure(resp.status_code, data, resp)
            raise GenerationError(f"Malformed response from generation service: {e.error_count()} invalid field(s)",
                                  status_code=resp.status_code) from e

    def _dump_failure(self, status: int, data: Any, resp: requests.Response) -> None:
        if not self.debug:
            return
        raw = data if data is not None else (resp.text or "")[:10000]
        _save_debug_log("generate_failure", {"status": status, "body": raw}, self.log_dir)

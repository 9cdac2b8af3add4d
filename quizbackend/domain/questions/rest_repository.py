"""
REST Question Statistics Store Module

Implementation of the QuestionStatsStore against a hosted Postgres database
exposed through a PostgREST-style HTTP API (``/rest/v1/<table>``).

Every failure is raised as a StoreError subclass that records its cause:
unreachable or timed out, non-success status, or undecodable payload.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from quizbackend.common.exceptions import (
    ConfigurationError,
    StorePayloadError,
    StoreResponseError,
    StoreUnavailableError,
)
from .model import COLUMNS, QuestionRecord, encode_changes
from .repository import QuestionStatsStore

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "question_difficulties"
DEFAULT_RECALCULATE_FUNCTION = "recalculate_all_difficulties"
DEFAULT_TIMEOUT = 10.0

# Most recently updated first; the file name only breaks ties between equal timestamps
PAGE_ORDER = f"{COLUMNS['last_updated']}.desc,{COLUMNS['question_file']}.asc"

_DECODE_ERRORS = (ValueError, TypeError, ArithmeticError)


class PostgrestQuestionStatsStore(QuestionStatsStore):
    """
    QuestionStatsStore backed by a PostgREST endpoint.
    
    The aiohttp session is created lazily on first use and closed by
    ``close()``. All requests share one bounded timeout.
    """
    
    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = DEFAULT_TABLE,
        recalculate_function: str = DEFAULT_RECALCULATE_FUNCTION,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the store.
        
        Args:
            base_url: Project URL, e.g. ``https://xyz.supabase.co``
            api_key: Service key sent as ``apikey`` and bearer token
            table: Table holding the per-question statistics
            recalculate_function: Stored procedure run by ``recalculate_all``
            timeout: Total timeout per request, in seconds
            session: Optional pre-built session (the store will not close it)
            
        Raises:
            ConfigurationError: If the URL or key is missing
        """
        if not base_url or not base_url.strip():
            raise ConfigurationError("Missing store URL (SUPABASE_URL)", config_key="SUPABASE_URL")
        if not api_key or not api_key.strip():
            raise ConfigurationError("Missing store key (SUPABASE_KEY)", config_key="SUPABASE_KEY")
        
        self.base_url = base_url.rstrip("/")
        self.table = table
        self.recalculate_function = recalculate_function
        self.timeout = timeout
        self._api_key = api_key
        self._session = session
        self._owns_session = session is None
        self._initialize_lock = asyncio.Lock()
    
    @classmethod
    def from_settings(cls, settings: Any) -> 'PostgrestQuestionStatsStore':
        """Build a store from application settings."""
        return cls(
            base_url=settings.SUPABASE_URL,
            api_key=settings.SUPABASE_KEY,
            table=settings.DIFFICULTY_TABLE,
            recalculate_function=settings.RECALCULATE_FUNCTION,
            timeout=settings.STORE_TIMEOUT_SECONDS
        )
    
    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"
    
    @property
    def rpc_url(self) -> str:
        return f"{self.base_url}/rest/v1/rpc/{self.recalculate_function}"
    
    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure an HTTP session exists."""
        if self._session is not None and not self._session.closed:
            return self._session
        
        async with self._initialize_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers={
                        "apikey": self._api_key,
                        "Authorization": f"Bearer {self._api_key}",
                    }
                )
                self._owns_session = True
        return self._session
    
    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        params: Optional[Dict[str, str]] = None,
        payload: Any = None,
        prefer: Optional[str] = None
    ) -> str:
        """
        Issue one request and return the response body.
        
        Raises:
            StoreUnavailableError: On connection failure or timeout
            StoreResponseError: On a non-success status
            StorePayloadError: If a success body is not valid UTF-8
        """
        session = await self._ensure_session()
        headers = {}
        if prefer:
            headers["Prefer"] = prefer
        
        try:
            async with session.request(
                method, url, params=params, json=payload, headers=headers
            ) as response:
                raw = await response.read()
                if response.status >= 400:
                    raise StoreResponseError(
                        f"{method} {self.table} failed",
                        status_code=response.status,
                        operation=operation,
                        body=raw[:500].decode("utf-8", errors="replace")
                    )
                try:
                    return raw.decode("utf-8")
                except UnicodeDecodeError as e:
                    raise StorePayloadError("response is not valid UTF-8", operation, e) from e
        except asyncio.TimeoutError as e:
            raise StoreUnavailableError(
                f"request timed out after {self.timeout}s", operation, e
            ) from e
        except aiohttp.ClientError as e:
            raise StoreUnavailableError(f"request failed: {e}", operation, e) from e
    
    @staticmethod
    def _decode_rows(body: str, operation: str) -> List[Dict[str, Any]]:
        try:
            rows = json.loads(body) if body.strip() else []
        except json.JSONDecodeError as e:
            raise StorePayloadError("response is not valid JSON", operation, e) from e
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise StorePayloadError("expected a JSON array of objects", operation)
        return rows
    
    @staticmethod
    def _decode_records(rows: List[Dict[str, Any]], operation: str) -> List[QuestionRecord]:
        try:
            return [QuestionRecord.from_row(row) for row in rows]
        except _DECODE_ERRORS as e:
            raise StorePayloadError(f"undecodable record: {e}", operation, e) from e
    
    def _key_filter(self, question_file: str) -> Dict[str, str]:
        return {COLUMNS['question_file']: f"eq.{question_file}"}
    
    async def fetch_one(self, question_file: str) -> Optional[QuestionRecord]:
        params = self._key_filter(question_file)
        params["select"] = "*"
        body = await self._request("fetch_one", "GET", self.table_url, params=params)
        records = self._decode_records(self._decode_rows(body, "fetch_one"), "fetch_one")
        return records[0] if records else None
    
    async def fetch_difficulty_map(self) -> Dict[str, str]:
        file_column = COLUMNS['question_file']
        difficulty_column = COLUMNS['difficulty']
        body = await self._request(
            "fetch_difficulty_map", "GET", self.table_url,
            params={"select": f"{file_column},{difficulty_column}"}
        )
        rows = self._decode_rows(body, "fetch_difficulty_map")
        
        mapping: Dict[str, str] = {}
        for row in rows:
            lowered = {str(k).lower(): v for k, v in row.items()}
            name = lowered.get(file_column.lower())
            if not name:
                continue
            difficulty = lowered.get(difficulty_column.lower())
            mapping[str(name)] = str(difficulty).strip().lower() if difficulty else "unrated"
        return mapping
    
    async def fetch_page(self, limit: int, offset: int) -> List[QuestionRecord]:
        body = await self._request(
            "fetch_page", "GET", self.table_url,
            params={
                "select": "*",
                "order": PAGE_ORDER,
                "limit": str(limit),
                "offset": str(offset),
            }
        )
        return self._decode_records(self._decode_rows(body, "fetch_page"), "fetch_page")
    
    async def insert(self, record: QuestionRecord) -> None:
        await self._request(
            "insert", "POST", self.table_url,
            payload=[record.to_row()],
            prefer="return=minimal"
        )
    
    async def patch(self, question_file: str, changes: Dict[str, Any]) -> None:
        await self._request(
            "patch", "PATCH", self.table_url,
            params=self._key_filter(question_file),
            payload=encode_changes(changes),
            prefer="return=minimal"
        )
    
    async def recalculate_all(self) -> int:
        body = await self._request("recalculate_all", "POST", self.rpc_url, payload={})
        try:
            return int(json.loads(body))
        except (json.JSONDecodeError, TypeError, ValueError, OverflowError):
            # The procedure ran; only its row count is unreadable
            logger.warning(f"Recalculation returned a non-numeric body: {body[:100]!r}")
            return 0
    
    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

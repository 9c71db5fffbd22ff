"""Record API adapter - HTTP client for fetching records and registering visits."""

import logging
import threading
from typing import Callable

import requests

from vigil.config import Config, load_config
from vigil.core.errors import ApiError
from vigil.core.records import RawRecord

logger = logging.getLogger(__name__)


class HttpRecordAdapter:
    """
    Record API adapter.

    Implements RecordRepository protocol. Every failure is raised as ApiError.
    No business logic - just I/O.

    Batch acknowledgments call this adapter from several worker threads at
    once, so each thread gets its own requests.Session.

    The timeout is requests' per-phase timeout: it bounds the connect and
    each read separately, not the request as a whole. A server that keeps
    trickling bytes can take longer than `fetch_timeout` in total.
    """

    def __init__(
        self,
        config: Config | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.config = config or load_config()
        self.base_url = self.config.api_url.rstrip("/")
        self.timeout = self.config.fetch_timeout
        self._session_factory = session_factory
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Session owned by the calling thread."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
        return session

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request, translating transport failures and non-2xx statuses."""
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise ApiError.timeout()
        except requests.ConnectionError as e:
            raise ApiError.network(str(e))
        except requests.RequestException as e:
            raise ApiError.unknown(str(e))

        if not resp.ok:
            raise ApiError.from_status(resp.status_code)
        return resp

    def fetch_all(self) -> list[RawRecord]:
        """Fetch every record. Items that cannot be read are skipped."""
        resp = self._request("GET", self.base_url)
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError.validation(f"Response is not JSON: {e}")

        if not isinstance(data, list):
            raise ApiError.validation(f"Expected a list of records, got {type(data).__name__}")

        records = []
        for item in data:
            try:
                records.append(RawRecord.from_api(item))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping unreadable record {item!r}: {e}")
        return records

    def update_last_verified(self, record_id: int, timestamp: str) -> None:
        """PATCH a record's last-verified timestamp."""
        self._request(
            "PATCH",
            f"{self.base_url}/{record_id}",
            json={"last_verified_date": timestamp},
        )

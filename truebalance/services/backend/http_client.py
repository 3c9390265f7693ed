"""
REST Backend Implementation

Talks to the TrueBalance REST API with httpx.

DESIGN DECISION: Read calls are retried on transport failures and 5xx
responses (tenacity, exponential backoff). Writes are never retried, since a
timed-out POST may already have created the record and a retry would create
it twice.

httpx errors never leak: they are wrapped in BackendError subclasses with
`raise ... from e`.
"""

from datetime import datetime
from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from truebalance.config import BackendSettings
from truebalance.exceptions import (
    BackendError,
    BackendRejectedError,
    BackendUnavailableError,
    NotFoundError,
)
from truebalance.models.finance import Bill, CreditCard, Invoice
from truebalance.models.imports import (
    BillImportItem,
    CreditCardImportItem,
    ImportItem,
    InvoiceImportItem,
)
from truebalance.services.backend.interface import FinanceBackendInterface


logger = structlog.get_logger(__name__)

BILLS_ENDPOINT = "/bills"
CREDIT_CARDS_ENDPOINT = "/credit-cards"
INVOICES_ENDPOINT = "/invoices"


def format_query_datetime(value: datetime) -> str:
    """Local datetime as the API expects it: YYYY-MM-DDTHH:MM:SS."""
    return value.strftime("%Y-%m-%dT%H:%M:%S")


class HttpFinanceBackend(FinanceBackendInterface):
    """
    Backend collaborator over the REST API.

    Use as an async context manager, or call aclose() when done.
    """

    def __init__(
        self,
        settings: Optional[BackendSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            settings: Base URL, timeout, retry and paging configuration
            client: Preconfigured client (tests inject a MockTransport here)
        """
        self._settings = settings or BackendSettings()
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
        )

    async def __aenter__(self) -> "HttpFinanceBackend":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # =========================================================================
    # READS
    # =========================================================================

    async def list_bills(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> list[Bill]:
        """Fetch every page of GET /bills."""
        page_size = self._settings.page_size
        params: dict[str, Any] = {"size": page_size}
        if date_from:
            params["startDate"] = format_query_datetime(date_from)
        if date_to:
            params["endDate"] = format_query_datetime(date_to)

        bills: list[Bill] = []
        page = 0
        while True:
            data = await self._get_json(BILLS_ENDPOINT, params={**params, "page": page})

            if isinstance(data, list):
                bills.extend(self._parse_list(Bill, data))
                break

            data = data or {}
            content = data.get("content") or []
            bills.extend(self._parse_list(Bill, content))

            if data.get("last", len(content) < page_size) or not content:
                break
            page += 1

        logger.debug("bills_listed", count=len(bills), pages=page + 1)
        return bills

    async def list_credit_cards(self) -> list[CreditCard]:
        data = await self._get_json(CREDIT_CARDS_ENDPOINT)
        return self._parse_list(CreditCard, data or [])

    async def list_invoices_by_credit_card(self, credit_card_id: int) -> list[Invoice]:
        data = await self._get_json(
            INVOICES_ENDPOINT,
            params={"creditCardId": credit_card_id},
        )
        return self._parse_list(Invoice, data or [])

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_bill(self, item: BillImportItem) -> Bill:
        data = await self._request("POST", BILLS_ENDPOINT, json=self._payload(item))
        return self._parse_one(Bill, data)

    async def create_invoice(self, item: InvoiceImportItem) -> Invoice:
        data = await self._request("POST", INVOICES_ENDPOINT, json=self._payload(item))
        return self._parse_one(Invoice, data)

    async def create_credit_card(self, item: CreditCardImportItem) -> CreditCard:
        data = await self._request("POST", CREDIT_CARDS_ENDPOINT, json=self._payload(item))
        return self._parse_one(CreditCard, data)

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    async def _get_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET with retries on BackendUnavailableError."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(
                multiplier=1,
                min=self._settings.retry_min_wait_seconds,
                max=self._settings.retry_max_wait_seconds,
            ),
            retry=retry_if_exception_type(BackendUnavailableError),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._request("GET", path, params=params)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        """
        Perform one HTTP call and decode the JSON body.

        Raises:
            NotFoundError: 404
            BackendRejectedError: other 4xx
            BackendUnavailableError: timeouts, connection errors, 5xx
            BackendError: undecodable body
        """
        try:
            response = await self._client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(
                f"Backend timeout after {self._settings.timeout_seconds}s on {method} {path}"
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = self._error_message(e.response)
            if status == 404:
                raise NotFoundError(message) from e
            if status >= 500:
                raise BackendUnavailableError(message) from e
            raise BackendRejectedError(message, status_code=status) from e
        except httpx.TransportError as e:
            raise BackendUnavailableError(f"Backend unreachable on {method} {path}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from {method} {path}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """The API's ErrorResponse carries a 'message'; fall back to the status."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"Backend error: {response.status_code}"

    @staticmethod
    def _payload(item: ImportItem) -> dict:
        return item.model_dump(by_alias=True, mode="json", exclude_none=True)

    @staticmethod
    def _parse_list(model: type, data: Any) -> list:
        """
        Validate each entry on its own.

        A malformed entry is logged and dropped; the rest of the listing
        is still returned. Only a body that is not a list raises.
        """
        if not isinstance(data, list):
            raise BackendError(
                f"Invalid {model.__name__} data from backend: expected a list, "
                f"got {type(data).__name__}"
            )

        records = []
        for index, entry in enumerate(data):
            try:
                records.append(model.model_validate(entry))
            except (TypeError, ValueError) as e:
                logger.warning(
                    "backend_record_skipped",
                    model=model.__name__,
                    index=index,
                    error=str(e),
                )
        return records

    @staticmethod
    def _parse_one(model: type, data: Any) -> Any:
        try:
            return model.model_validate(data)
        except (TypeError, ValueError) as e:
            raise BackendError(f"Invalid {model.__name__} data from backend: {e}") from e

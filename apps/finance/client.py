"""
HTTP gateway between the client-side workflows and the back-office API.

Idempotent GETs are retried with exponential backoff and jitter. POST and
PUT requests are sent exactly once: a timed-out approval may already have
been applied, so repeating it is left to the caller.
"""

import logging
import random
import time
from typing import Iterable, Optional

import requests
from django.conf import settings

from .exceptions import ApiError, NetworkError, TransitionRejectedError

logger = logging.getLogger(__name__)

# Statuses on a state-changing PUT that mean the server refused the transition
TRANSITION_REJECTION_STATUSES = frozenset({403, 409})


class BackOfficeClient:
    """Session-based client for the /api/ endpoints."""

    def __init__(self, base_url: str, *, token: Optional[str] = None,
                 timeout: float = 10.0, max_retries: int = 3,
                 backoff: float = 1.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff = backoff
        self.session = session or requests.Session()
        self.session.headers['Accept'] = 'application/json'
        if token:
            self.set_token(token)

    @classmethod
    def from_settings(cls, *, token: Optional[str] = None,
                      session: Optional[requests.Session] = None) -> 'BackOfficeClient':
        return cls(
            settings.BACKOFFICE_API_URL,
            token=token,
            timeout=settings.BACKOFFICE_API_TIMEOUT,
            max_retries=settings.BACKOFFICE_API_MAX_RETRIES,
            session=session,
        )

    def set_token(self, token: str) -> None:
        self.session.headers['Authorization'] = f'Bearer {token}'

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api/{path.lstrip('/')}"

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

    def _get(self, path: str, params: Optional[dict] = None):
        """GET with bounded retries on network failures and 5xx answers."""
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._send('GET', path, params=params)
            except NetworkError as e:
                last_error = e
            else:
                if response.status_code < 500:
                    return self._json(response)
                last_error = self._api_error(response)

            if attempt < self.max_retries:
                delay = self.backoff * (2 ** (attempt - 1)) + random.random()
                logger.warning("GET %s attempt %d failed: %s", path, attempt, last_error)
                time.sleep(delay)

        logger.error("GET %s permanently failed: %s", path, last_error)
        raise last_error

    def _post(self, path: str, **kwargs):
        return self._json(self._send('POST', path, **kwargs))

    def _transition(self, path: str, payload: dict):
        """
        PUT a state change.

        403 and 409 answers raise TransitionRejectedError; any other
        non-2xx answer is a plain ApiError.
        """
        response = self._send('PUT', path, json=payload)
        if response.status_code in TRANSITION_REJECTION_STATUSES:
            raise self._api_error(response, error_class=TransitionRejectedError)
        return self._json(response)

    def _json(self, response: requests.Response, *, error_class=ApiError):
        if not response.ok:
            raise self._api_error(response, error_class=error_class)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _api_error(response: requests.Response, *, error_class=ApiError) -> ApiError:
        """Build an error carrying the server's message verbatim."""
        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = None
        if isinstance(payload, dict):
            message = payload.get('error') or payload.get('detail')
        if not message:
            message = response.text or f"HTTP {response.status_code}"

        return error_class(str(message), status_code=response.status_code, payload=payload)

    @staticmethod
    def _results(data):
        """Unwrap a paginated list response."""
        if isinstance(data, dict) and 'results' in data:
            return data['results']
        return data

    # ------------------------------------------------------------------
    # Auth & staff
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> dict:
        """Log in and keep the access token on the session."""
        data = self._post('auth/login/', json={'email': email, 'password': password})
        self.set_token(data['tokens']['access'])
        return data['user']

    def list_staff(self, *, role: Optional[str] = None) -> list:
        params = {'role': role} if role else None
        return self._get('auth/staff/', params=params)

    # ------------------------------------------------------------------
    # Invoices & refunds
    # ------------------------------------------------------------------

    def list_invoices_for_refund(self, *, brand_code: Optional[str] = None,
                                 auction: Optional[str] = None,
                                 search: Optional[str] = None) -> list:
        params = {k: v for k, v in {
            'brand_code': brand_code,
            'auction': auction,
            'search': search,
        }.items() if v}
        return self._results(self._get('invoices/for-refund/', params=params))

    def get_invoice(self, invoice_id) -> dict:
        return self._get(f'invoices/{invoice_id}/')

    def create_refund(self, payload: dict) -> dict:
        return self._post('refunds/', json=payload)

    def get_refund(self, refund_id) -> dict:
        return self._get(f'refunds/{refund_id}/')

    def list_refunds(self, **filters) -> list:
        return self._results(self._get('refunds/', params=filters or None))

    def approve_refund(self, refund_id, *, comments: Optional[str] = None) -> dict:
        payload = {'comments': comments} if comments else {}
        logger.info("PUT approve on refund %s", refund_id)
        return self._transition(f'refunds/{refund_id}/approve/', payload)

    def process_refund(self, refund_id, *, status: str, refund_date=None,
                       payment_reference: Optional[str] = None) -> dict:
        """
        Move an approved refund to processing, completed or failed.

        Args:
            refund_id: Refund id
            status: 'processing', 'completed' or 'failed'
            refund_date: date or ISO string; the server defaults completed refunds to today
            payment_reference: Bank or card reference, optional

        Raises:
            TransitionRejectedError: If the server refuses the change (403 or 409)
            ApiError: On any other non-2xx answer
        """
        payload = {'status': status}
        if refund_date is not None:
            payload['refund_date'] = str(refund_date)
        if payment_reference:
            payload['payment_reference'] = payment_reference

        logger.info("PUT process on refund %s (status=%s)", refund_id, status)
        return self._transition(f'refunds/{refund_id}/process/', payload)

    def cancel_refund(self, refund_id, *, reason: str) -> dict:
        logger.info("PUT cancel on refund %s", refund_id)
        return self._transition(f'refunds/{refund_id}/cancel/', {'reason': reason})

    # ------------------------------------------------------------------
    # Reimbursements
    # ------------------------------------------------------------------

    def create_reimbursement(self, payload: dict) -> dict:
        return self._post('reimbursements/', json=payload)

    def get_reimbursement(self, reimbursement_id) -> dict:
        return self._get(f'reimbursements/{reimbursement_id}/')

    def list_reimbursements(self, **filters) -> list:
        return self._results(self._get('reimbursements/', params=filters or None))

    def pending_approvals(self) -> list:
        return self._results(self._get('reimbursements/pending-approvals/'))

    def decide(self, reimbursement_id, action: str, *, approved: bool, comments: str,
               rejection_reason: Optional[str] = None,
               payment_reference: Optional[str] = None) -> dict:
        """
        Record one approval stage decision.

        Args:
            reimbursement_id: Record id
            action: Endpoint slug, e.g. 'approve-director1'
            approved: True to approve, False to reject
            comments: Audit comment (required by the server)
            rejection_reason: Required when approved is False
            payment_reference: Optional, accountant stage only

        Returns:
            The updated record as returned by the server

        Raises:
            TransitionRejectedError: If the server refuses the decision (403 or 409)
            ApiError: On any other non-2xx answer, e.g. a 400 for bad input
            NetworkError: If the request did not complete
        """
        payload = {'approved': approved, 'comments': comments}
        if rejection_reason is not None:
            payload['rejection_reason'] = rejection_reason
        if payment_reference is not None:
            payload['payment_reference'] = payment_reference

        logger.info("PUT %s on reimbursement %s (approved=%s)", action, reimbursement_id, approved)
        return self._transition(
            f'reimbursements/{reimbursement_id}/{action}/',
            payload,
        )

    def complete_payment(self, reimbursement_id, *, payment_reference: str,
                         comments: Optional[str] = None) -> dict:
        payload = {'payment_reference': payment_reference}
        if comments:
            payload['comments'] = comments

        logger.info("PUT complete-payment on reimbursement %s", reimbursement_id)
        return self._transition(
            f'reimbursements/{reimbursement_id}/complete-payment/',
            payload,
        )

    def upload_receipts(self, files: Iterable) -> list:
        """
        Upload receipt attachments.

        Args:
            files: (filename, content, content_type) tuples; content is bytes
                or a binary file object

        Returns:
            Stored receipt URLs in upload order
        """
        multipart = [('files', (name, content, content_type)) for name, content, content_type in files]
        data = self._post('reimbursements/receipts/', files=multipart)
        return data['urls']

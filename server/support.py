# support.py
"""
Support center page logic.

- SupportClient: aiohttp client for the frontend config endpoint and the
  external ticket API.
- SupportForm / FaqAccordion: form field state and the one-open-at-a-time
  FAQ list.
- SupportManager: page controller tying storage, form, client and toasts
  together. Every user-visible outcome is returned as a Toast and/or a
  Redirect for the host page to show.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from collections import deque
from typing import Any, AsyncIterator, Deque, Dict, List, Mapping, Optional

import aiohttp
from pydantic import BaseModel, ValidationError

from config import EXTERNAL_API_BASE, HTTP_TIMEOUT, SITE_URL
from logging_utils import log_event
from models import Redirect, SupportTicketRequest, Toast, ToastKind, UserProfile
from storage import KeyValueStore, read_access_token, read_user

logger = logging.getLogger("tripzip.support")

LOGIN_PAGE = "/login"
SESSION_EXPIRED_REDIRECT_DELAY_MS = 2000
MAX_TOASTS = 5

MSG_REQUIRED_FIELDS = "Please fill in all required fields"
MSG_SUBMITTED = "Support request submitted successfully! We'll get back to you within 24 hours."
MSG_SESSION_EXPIRED = "Session expired. Please login again."
MSG_SUBMIT_FAILED = "Failed to submit support request. Please try again."

# HTML form field name -> ticket field
FORM_FIELDS: Dict[str, str] = {
    "contactName": "name",
    "contactEmail": "email",
    "contactSubject": "subject",
    "bookingReference": "booking_reference",
    "contactMessage": "message",
    "contactPriority": "priority",
}


class SupportSubmissionError(Exception):
    """Ticket API call failed; status is None when no response came back."""

    def __init__(self, status: Optional[int], message: Optional[str] = None) -> None:
        super().__init__(message or f"support ticket request failed (status={status})")
        self.status = status
        self.message = message


# ---------------------------------------------------------------------
# HTTP client


class SupportClient:
    def __init__(
        self,
        config_url: str = f"{SITE_URL}/api/config",
        fallback_base_url: str = EXTERNAL_API_BASE,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        self.config_url = config_url
        self.fallback_base_url = fallback_base_url
        self._timeout = aiohttp.ClientTimeout(total=timeout, connect=4)
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "SupportClient":
        self._session = aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _session_scope(self) -> AsyncIterator[aiohttp.ClientSession]:
        if self._session is not None:
            yield self._session
            return
        async with aiohttp.ClientSession(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        ) as session:
            yield session

    async def get_base_url(self) -> str:
        try:
            async with self._session_scope() as session:
                async with session.get(self.config_url) as r:
                    r.raise_for_status()
                    body = await r.json(content_type=None)
            base_url = body.get("apiBaseUrl") if isinstance(body, dict) else None
            if not isinstance(base_url, str) or not base_url.strip():
                base_url = None
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log_event(
                logger,
                "config_fetch_failed",
                level=logging.WARNING,
                url=self.config_url,
                error=str(e),
            )
            base_url = None

        return (base_url or self.fallback_base_url).rstrip("/")

    async def submit_ticket(self, ticket: SupportTicketRequest, token: Optional[str]) -> Any:
        base_url = await self.get_base_url()
        url = f"{base_url}/v1/support/tickets"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            async with self._session_scope() as session:
                async with session.post(url, json=ticket.model_dump(), headers=headers) as r:
                    status = r.status
                    try:
                        body = await r.json(content_type=None)
                    except ValueError:
                        body = None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log_event(logger, "support_ticket_http_error", level=logging.ERROR, url=url, error=str(e))
            raise SupportSubmissionError(None) from e

        log_event(logger, "support_ticket_http_call", endpoint=url, status_code=status)

        if status >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            if not isinstance(message, str) or not message.strip():
                message = None
            raise SupportSubmissionError(status, message)
        return body


# ---------------------------------------------------------------------
# Page state


def parse_support_form(fields: Mapping[str, Optional[str]]) -> Optional[SupportTicketRequest]:
    """Build a ticket from form fields; None when a required field is empty."""
    data = {ticket_key: fields.get(form_key) for form_key, ticket_key in FORM_FIELDS.items()}
    try:
        return SupportTicketRequest.model_validate(data)
    except ValidationError as e:
        log_event(
            logger,
            "support_form_invalid",
            level=logging.INFO,
            fields=[".".join(str(p) for p in err["loc"]) for err in e.errors()],
        )
        return None


class SupportForm:
    def __init__(self) -> None:
        self.fields: Dict[str, str] = {key: "" for key in FORM_FIELDS}

    def set(self, field: str, value: str) -> None:
        if field not in FORM_FIELDS:
            raise KeyError(field)
        self.fields[field] = value

    def reset(self) -> None:
        for key in self.fields:
            self.fields[key] = ""

    def prefill(self, user: UserProfile) -> None:
        self.fields["contactName"] = user.display_name or ""
        self.fields["contactEmail"] = user.email or ""


class FaqAccordion:
    """At most one answer is expanded at a time."""

    def __init__(self, count: int) -> None:
        self.count = count
        self.open_index: Optional[int] = None

    def toggle(self, index: int) -> None:
        if not 0 <= index < self.count:
            raise IndexError(index)
        self.open_index = None if self.open_index == index else index

    def is_open(self, index: int) -> bool:
        return self.open_index == index

    @property
    def open_items(self) -> List[int]:
        return [] if self.open_index is None else [self.open_index]

    def icon(self, index: int) -> str:
        chevron = "up" if self.is_open(index) else "down"
        return f"fas fa-chevron-{chevron} text-gray-400"


class SubmissionResult(BaseModel):
    ok: bool
    toast: Toast
    redirect: Optional[Redirect] = None
    response: Any = None


class SupportManager:
    def __init__(
        self,
        store: KeyValueStore,
        client: SupportClient,
        faq_count: int = 0,
    ) -> None:
        self._store = store
        self.client = client
        self.form = SupportForm()
        self.faq = FaqAccordion(faq_count)
        self.toasts: Deque[Toast] = deque(maxlen=MAX_TOASTS)
        self.submitting = False

    def init(self) -> Optional[Redirect]:
        """Page bootstrap: unauthenticated visitors go to the login page."""
        if read_access_token(self._store) is None:
            log_event(logger, "support_page_unauthenticated")
            return Redirect(location=LOGIN_PAGE)
        self.load_user_info()
        return None

    def load_user_info(self) -> Optional[UserProfile]:
        user = read_user(self._store)
        if user is not None:
            self.form.prefill(user)
        return user

    def show_toast(self, message: str, kind: ToastKind = ToastKind.INFO) -> Toast:
        toast = Toast(message=message, kind=kind)
        self.toasts.append(toast)
        return toast

    def drain_toasts(self) -> List[Toast]:
        """Hand pending toasts to the page and forget them."""
        toasts = list(self.toasts)
        self.toasts.clear()
        return toasts

    async def submit_support_request(self) -> Optional[SubmissionResult]:
        """Validate and send the form; None while a previous submit is still in flight."""
        if self.submitting:
            log_event(logger, "support_submit_ignored_in_flight")
            return None

        ticket = parse_support_form(self.form.fields)
        if ticket is None:
            return SubmissionResult(ok=False, toast=self.show_toast(MSG_REQUIRED_FIELDS, ToastKind.ERROR))

        self.submitting = True
        try:
            token = read_access_token(self._store)
            response = await self.client.submit_ticket(ticket, token)
        except SupportSubmissionError as e:
            log_event(
                logger,
                "support_ticket_failed",
                level=logging.ERROR,
                status_code=e.status,
                error=str(e),
            )
            if e.status == 401:
                return SubmissionResult(
                    ok=False,
                    toast=self.show_toast(MSG_SESSION_EXPIRED, ToastKind.ERROR),
                    redirect=Redirect(location=LOGIN_PAGE, delay_ms=SESSION_EXPIRED_REDIRECT_DELAY_MS),
                )
            return SubmissionResult(
                ok=False,
                toast=self.show_toast(e.message or MSG_SUBMIT_FAILED, ToastKind.ERROR),
            )
        finally:
            self.submitting = False

        log_event(logger, "support_ticket_submitted", subject=ticket.subject, priority=ticket.priority)
        self.form.reset()
        self.load_user_info()
        return SubmissionResult(
            ok=True,
            toast=self.show_toast(MSG_SUBMITTED, ToastKind.SUCCESS),
            response=response,
        )

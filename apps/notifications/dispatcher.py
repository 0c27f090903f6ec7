"""
Transactional message clients.

Every client exposes send(address, template_id, params) -> message_id and
raises a DispatchError subclass on failure:
- InvalidAddressError: empty/malformed address, or rejected by the provider
- InvalidCredentialsError: API key missing or refused
- ProviderUnavailableError: timeout, network failure, 429/5xx, bad response

The client used by the jobs is selected with settings.MESSAGE_CLIENT.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

import httpx
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class DispatchError(Exception):
    """Base class for message send failures."""


class InvalidAddressError(DispatchError):
    pass


class InvalidCredentialsError(DispatchError):
    pass


class ProviderUnavailableError(DispatchError):
    pass


def _check_address(address: str) -> str:
    cleaned = (address or '').strip()
    if not cleaned:
        raise InvalidAddressError('Recipient address is empty')
    try:
        validate_email(cleaned)
    except ValidationError as exc:
        raise InvalidAddressError(f'Invalid recipient address: {cleaned}') from exc
    return cleaned


class BrevoClient:
    """
    Brevo (Sendinblue) transactional e-mail client.

    Uses one pooled httpx.Client, which is safe to share between the
    dispatch worker threads.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.BREVO_API_KEY
        self.base_url = base_url or settings.BREVO_API_URL
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None
            else settings.DISPATCH_TIMEOUT_SECONDS
        )
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=transport,
            headers={
                'Accept': 'application/json',
                'Content-Type': 'application/json',
                'api-key': self.api_key or '',
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> 'BrevoClient':
        return self

    def __exit__(self, *_) -> None:
        self.close()

    def send(self, address: str, template_id: int, params: Dict[str, Any]) -> str:
        if not self.api_key:
            raise InvalidCredentialsError('BREVO_API_KEY is not configured')
        address = _check_address(address)
        payload = {
            'to': [{'email': address}],
            'templateId': template_id,
            'params': params,
        }
        try:
            response = self._client.post('/smtp/email', json=payload)
        except httpx.TimeoutException as exc:
            raise ProviderUnavailableError(
                f'Brevo request timed out after {self.timeout_seconds}s'
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(f'Brevo request failed: {exc}') from exc

        if response.status_code in (401, 403):
            raise InvalidCredentialsError(
                f'Brevo API error: {response.status_code} - {response.text}'
            )
        if response.status_code == 429 or response.status_code >= 500:
            raise ProviderUnavailableError(
                f'Brevo API error: {response.status_code} - {response.text}'
            )
        if response.status_code >= 400:
            detail = response.text
            if 'email' in detail.lower():
                raise InvalidAddressError(
                    f'Brevo rejected {address}: {response.status_code} - {detail}'
                )
            raise DispatchError(f'Brevo API error: {response.status_code} - {detail}')

        try:
            message_id = response.json()['messageId']
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderUnavailableError('Brevo response did not include a messageId') from exc
        return message_id


class ConsoleMessageClient:
    """
    Development client that logs messages instead of sending them.

    Mirrors Django's console e-mail backend.
    """

    def close(self) -> None:
        pass

    def send(self, address: str, template_id: int, params: Dict[str, Any]) -> str:
        address = _check_address(address)
        message_id = f'<console-{uuid.uuid4().hex}@localhost>'
        logger.info(f'[console] template={template_id} to={address} params={params} id={message_id}')
        return message_id


def get_message_client():
    """Instantiate the client configured in settings.MESSAGE_CLIENT."""
    return import_string(settings.MESSAGE_CLIENT)()

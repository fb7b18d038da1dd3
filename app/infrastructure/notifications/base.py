"""Shared contract for the push delivery adapters."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from anyio import to_thread

from app.domain.entities import (
    DeliveryOutcome,
    DeliveryProvider,
    DeliveryResult,
    NormalizedMessage,
)

logger = logging.getLogger(__name__)


class ProviderConfigurationError(RuntimeError):
    """The provider rejected the service's own credentials or setup."""


class ProviderRequestError(RuntimeError):
    """A single provider call failed for reasons unrelated to the addresses."""


class DeliveryAdapter(ABC):
    """Send one message to a batch of device addresses through a provider.

    Subclasses implement :meth:`_send_chunk` as a blocking call. :meth:`send`
    splits the batch into chunks of :attr:`max_batch_size`, runs every chunk in
    a worker thread and returns one :class:`DeliveryOutcome` per address in
    input order. Chunk failures never raise: a
    :class:`ProviderRequestError` turns that chunk into ``transient-error``
    outcomes, and a :class:`ProviderConfigurationError` turns every remaining
    address into configuration ``transient-error`` outcomes.
    """

    provider: DeliveryProvider
    max_batch_size: int

    @property
    def configuration_error(self) -> str | None:
        """Describe why the adapter cannot deliver at all, if that is the case."""

        return None

    @property
    def configured(self) -> bool:
        return self.configuration_error is None

    async def send(
        self, batch: Sequence[str], message: NormalizedMessage
    ) -> list[DeliveryOutcome]:
        addresses = list(batch)
        if not addresses:
            return []

        if not self.configured:
            logger.warning(
                "%s delivery skipped for %d addresses: %s",
                self.provider.value,
                len(addresses),
                self.configuration_error,
            )
            return self.fail_all(
                addresses, self.configuration_error, configuration_error=True
            )

        outcomes: list[DeliveryOutcome] = []
        for start in range(0, len(addresses), self.max_batch_size):
            chunk = addresses[start : start + self.max_batch_size]
            try:
                chunk_outcomes = await to_thread.run_sync(
                    self._send_chunk, chunk, message
                )
            except ProviderConfigurationError as exc:
                logger.error(
                    "%s rejected the service configuration, %d addresses not sent: %s",
                    self.provider.value,
                    len(addresses) - start,
                    exc,
                )
                outcomes.extend(
                    self.fail_all(addresses[start:], str(exc), configuration_error=True)
                )
                break
            except ProviderRequestError as exc:
                logger.warning(
                    "%s chunk of %d addresses failed: %s",
                    self.provider.value,
                    len(chunk),
                    exc,
                )
                chunk_outcomes = self.fail_all(chunk, str(exc))
            outcomes.extend(chunk_outcomes)
        return outcomes

    def fail_all(
        self,
        addresses: Sequence[str],
        detail: str | None,
        *,
        configuration_error: bool = False,
    ) -> list[DeliveryOutcome]:
        """Return a ``transient-error`` outcome for every address."""

        return [
            DeliveryOutcome(
                address=address,
                provider=self.provider,
                result=DeliveryResult.TRANSIENT_ERROR,
                error_detail=detail,
                configuration_error=configuration_error,
            )
            for address in addresses
        ]

    def outcome(
        self,
        address: str,
        result: DeliveryResult,
        detail: str | None = None,
        *,
        configuration_error: bool = False,
    ) -> DeliveryOutcome:
        return DeliveryOutcome(
            address=address,
            provider=self.provider,
            result=result,
            error_detail=detail,
            configuration_error=configuration_error,
        )

    @abstractmethod
    def _send_chunk(
        self, chunk: list[str], message: NormalizedMessage
    ) -> list[DeliveryOutcome]:
        """Deliver ``message`` to ``chunk`` and return outcomes in chunk order."""


def mask_token(token: str, visible: int = 10) -> str:
    """Shorten ``token`` for logs and diagnostics."""

    if len(token) <= visible:
        return token
    return f"{token[:visible]}..."


__all__ = [
    "DeliveryAdapter",
    "ProviderConfigurationError",
    "ProviderRequestError",
    "mask_token",
]

"""
Alliance of Genome Resources API client for ortholog retrieval.

Turns a gene identifier into the ordered taxon list used for tree building:
the query gene first, followed by its orthologs in the order the API
returns them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

import httpx

from orthotree.core.constants import ALLIANCE_API_BASE
from orthotree.core.exceptions import OrthotreeError
from orthotree.core.phylogeny.conservation import (
    ConservationSummary,
    OrthologScore,
    conservation_score,
)
from orthotree.core.phylogeny.models import Taxon

if TYPE_CHECKING:
    from orthotree.models.config import AllianceConfig

logger = logging.getLogger(__name__)

# Retry policy: wait DEFAULT_RETRY_DELAY, then multiply the wait by
# DEFAULT_RETRY_BACKOFF after each failed attempt
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_RETRY_BACKOFF = 2.0


class AllianceAPIError(OrthotreeError):
    """Error communicating with the Alliance API."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        suggestion = "Check your internet connection and try again."
        if status_code == 404:
            suggestion = (
                "The gene may not exist in the Alliance. Use a prefixed "
                "identifier such as HGNC:1100 or MGI:88276."
            )
        elif status_code == 429:
            suggestion = "Rate limited. Wait a moment and try again."
        elif status_code and status_code >= 500:
            suggestion = "Alliance server error. Try again later."

        super().__init__(message=message, suggestion=suggestion)


@dataclass(frozen=True)
class AllianceGene:
    """Gene record from the Alliance.

    Attributes:
        id: Gene identifier (e.g., HGNC:1100)
        symbol: Gene symbol
        species: Species name
        name: Full gene name
        best_score: Whether the ortholog call is a best score (orthologs only)
        best_reverse: Whether the call is a best reverse score (orthologs only)
    """

    id: str
    symbol: str
    species: str
    name: str | None = None
    best_score: bool | None = None
    best_reverse: bool | None = None

    def to_taxon(self) -> Taxon:
        return Taxon(id=self.id, symbol=self.symbol, species=self.species, name=self.name)

    @property
    def conservation(self) -> float | None:
        """Share of the best-score flags that hold, or None if neither is known."""
        flags = [f for f in (self.best_score, self.best_reverse) if f is not None]
        if not flags:
            return None
        return sum(flags) / len(flags)

    def to_ortholog_score(self) -> OrthologScore:
        return OrthologScore(
            id=self.id, symbol=self.symbol, species=self.species, score=self.conservation
        )


def _species_name(value: Any) -> str:
    """Species may be a plain name or an object with a ``name`` field."""
    if isinstance(value, dict):
        return str(value.get("name") or "")
    return str(value or "")


def _as_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "true", "1")
    return bool(value)


class AllianceClient:
    """Client for Alliance of Genome Resources API requests.

    Attributes:
        api_base: Base URL of the REST API
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_base: str = ALLIANCE_API_BASE,
        timeout: float = 30.0,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
    ):
        """Initialize Alliance client.

        Args:
            api_base: Base URL of the REST API.
            timeout: Request timeout in seconds.
            max_retries: Maximum retry attempts for transient failures.
            retry_delay: Initial delay between retries in seconds.
            retry_backoff: Exponential backoff multiplier for retries.
        """
        self.api_base = api_base
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
        self._client: httpx.Client | None = None

    @classmethod
    def from_config(cls, config: AllianceConfig) -> AllianceClient:
        """Create a client from an ``AllianceConfig``."""
        return cls(
            api_base=config.api_base,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            retry_backoff=config.retry_backoff,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.api_base,
                timeout=self.timeout,
                headers={
                    "Accept": "application/json",
                    "User-Agent": "orthotree",
                },
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_gene(self, gene_id: str) -> AllianceGene:
        """Fetch a single gene record.

        Raises:
            AllianceAPIError: If the request fails or the record lacks a symbol.
        """
        data = self._get(f"/gene/{quote(gene_id, safe=':')}")
        if not isinstance(data, dict) or not data.get("symbol"):
            raise AllianceAPIError(f"Unexpected gene record for {gene_id}")
        return AllianceGene(
            id=str(data.get("id") or gene_id),
            symbol=str(data["symbol"]),
            species=_species_name(data.get("species")),
            name=data.get("name"),
        )

    def get_orthologs(
        self,
        gene_id: str,
        species: list[str] | None = None,
    ) -> tuple[Taxon, ...]:
        """Query gene followed by its orthologs, as taxa.

        Args:
            gene_id: Gene identifier (e.g., HGNC:1100).
            species: Keep orthologs whose species contains any of these
                strings (case-insensitive). None or ["all"] keeps all.

        Returns:
            Ordered taxa: the query gene, then orthologs in API order.

        Raises:
            AllianceAPIError: If an API request fails.
        """
        orthologs = self._fetch_orthologs(gene_id, species)

        query = self.get_gene(gene_id)
        taxa = [query.to_taxon()]
        seen = {query.id}
        for ortholog in orthologs:
            if ortholog.id in seen:
                logger.debug(f"Skipping duplicate ortholog {ortholog.id}")
                continue
            seen.add(ortholog.id)
            taxa.append(ortholog.to_taxon())

        logger.info(f"Retrieved {len(taxa) - 1} orthologs for {gene_id}")
        return tuple(taxa)

    def get_conservation(
        self,
        gene_id: str,
        species: list[str] | None = None,
    ) -> ConservationSummary:
        """Average ortholog conservation of a gene.

        Each ortholog scores the share of its best-score flags (``best``,
        ``bestReverse``) that hold. Orthologs with neither flag are not
        scored.

        Args:
            gene_id: Gene identifier (e.g., HGNC:1100).
            species: Species filter, as for ``get_orthologs``.

        Raises:
            AllianceAPIError: If the request fails.
        """
        seen = {gene_id}
        scores = []
        for ortholog in self._fetch_orthologs(gene_id, species):
            if ortholog.id in seen:
                continue
            seen.add(ortholog.id)
            scores.append(ortholog.to_ortholog_score())
        return conservation_score(gene_id, scores)

    def _fetch_orthologs(
        self,
        gene_id: str,
        species: list[str] | None,
    ) -> tuple[AllianceGene, ...]:
        data = self._get(f"/gene/{quote(gene_id, safe=':')}/orthologs")
        orthologs = self._parse_orthologs(data)

        if species and "all" not in species:
            wanted = [s.lower() for s in species]
            orthologs = tuple(
                o for o in orthologs if any(w in o.species.lower() for w in wanted)
            )
        return orthologs

    def _get(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        """Decoded JSON body of ``endpoint``.

        Server errors, HTTP 429 and network failures are retried up to
        ``max_retries`` times with a growing wait; a 429 response sets the
        wait from its Retry-After header. Other 4xx statuses fail at once.

        Raises:
            AllianceAPIError: On a non-retryable status or when retries run out.
        """
        client = self._get_client()
        last_exception: Exception | None = None
        delay = self.retry_delay

        for attempt in range(self.max_retries + 1):
            try:
                response = client.get(endpoint, params=params)
                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                last_exception = e
                status_code = e.response.status_code

                # 4xx other than 429 is final
                if 400 <= status_code < 500 and status_code != 429:
                    raise AllianceAPIError(
                        f"Alliance API request failed: {status_code}",
                        status_code=status_code,
                    ) from e

                if status_code == 429:
                    retry_after = e.response.headers.get("Retry-After")
                    if retry_after:
                        delay = float(retry_after)

                if attempt < self.max_retries:
                    logger.warning(
                        "GET %s returned %d (attempt %d of %d), retrying in %.1fs",
                        endpoint,
                        status_code,
                        attempt + 1,
                        self.max_retries + 1,
                        delay,
                    )
                    time.sleep(delay)
                    delay *= self.retry_backoff

            except httpx.RequestError as e:
                last_exception = e
                if attempt < self.max_retries:
                    logger.warning(
                        "GET %s failed: %s (attempt %d of %d), retrying in %.1fs",
                        endpoint,
                        e,
                        attempt + 1,
                        self.max_retries + 1,
                        delay,
                    )
                    time.sleep(delay)
                    delay *= self.retry_backoff

        if isinstance(last_exception, httpx.HTTPStatusError):
            raise AllianceAPIError(
                f"Alliance API request failed after {self.max_retries + 1} attempts: "
                f"{last_exception.response.status_code}",
                status_code=last_exception.response.status_code,
            ) from last_exception
        raise AllianceAPIError(
            f"Alliance API request failed after {self.max_retries + 1} attempts: "
            f"{last_exception}"
        ) from last_exception

    @staticmethod
    def _parse_orthologs(data: Any) -> tuple[AllianceGene, ...]:
        """Parse ortholog entries from an ``{"results": [...]}`` response.

        Entries without an id or symbol are skipped.
        """
        if isinstance(data, dict):
            rows = data.get("results") or []
        elif isinstance(data, list):
            rows = data
        else:
            return ()

        genes = []
        for entry in rows:
            if not isinstance(entry, dict):
                continue
            gene_id = entry.get("id")
            symbol = entry.get("symbol")
            if not gene_id or not symbol:
                continue
            genes.append(
                AllianceGene(
                    id=str(gene_id),
                    symbol=str(symbol),
                    species=_species_name(entry.get("species")),
                    name=entry.get("name"),
                    best_score=_as_bool(entry.get("best")),
                    best_reverse=_as_bool(entry.get("bestReverse")),
                )
            )
        return tuple(genes)

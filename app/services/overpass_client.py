"""Client to fetch tourist places from the Overpass API."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.errors import UpstreamDataInvalid, UpstreamUnavailable
from app.models.places import CategoryEnum, NearPoint, RawRecord
from app.utils.classifier import WILDCARD, MatchCondition, conditions_for

logger = logging.getLogger(__name__)

SOURCE = "overpass"


def build_query(
    conditions: List[MatchCondition],
    bbox: tuple,
    limit: int,
    timeout: int = 25,
    near: Optional[NearPoint] = None,
) -> str:
    """
    Build one Overpass QL query covering every condition.

    Clauses are bounded by the region bbox, or by an `around` circle when a
    near point is given.
    """
    if near is not None:
        area_filter = f"around:{near.radius_m},{near.lat},{near.lon}"
    else:
        area_filter = ",".join(str(value) for value in bbox)
    clauses = []
    for condition in conditions:
        if condition.pattern == WILDCARD:
            selector = f'["{condition.key}"]'
        else:
            selector = f'["{condition.key}"~"^({condition.pattern})$"]'
        clauses.append(f"  nwr{selector}({area_filter});")

    return "\n".join(
        [f"[out:json][timeout:{timeout}];", "(", *clauses, ");", f"out center {limit};"]
    )


def parse_elements(payload: Any, limit: int) -> List[RawRecord]:
    """Turn an Overpass JSON payload into raw records, in provider order."""
    if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
        raise UpstreamDataInvalid("Overpass response is missing the 'elements' array")

    records: List[RawRecord] = []
    for element in payload["elements"]:
        if not isinstance(element, dict):
            continue
        tags = element.get("tags")
        center = element.get("center")
        records.append(
            RawRecord(
                source=SOURCE,
                native_id=f"{element.get('type', 'node')}-{element.get('id')}",
                tags=tags if isinstance(tags, dict) else {},
                lat=element.get("lat"),
                lon=element.get("lon"),
                center=center if isinstance(center, dict) else None,
            )
        )
        if len(records) >= limit:
            break

    return records


class OverpassClient:
    """HTTP client wrapper for the Overpass interpreter."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.url = settings.overpass_url
        self.timeout = settings.http_timeout
        self.limit = settings.places_result_limit
        self.transport = transport

    async def fetch_places(
        self,
        category: Optional[CategoryEnum] = None,
        near: Optional[NearPoint] = None,
    ) -> List[RawRecord]:
        """
        Fetch raw places for one category (or all of them) inside the region.

        Args:
            category: Category filter; None means every category
            near: Circle to search instead of the region bbox

        Returns:
            Raw records in provider order, capped at the configured limit

        Raises:
            UpstreamUnavailable: Overpass unreachable or non-2xx
            UpstreamDataInvalid: Overpass payload is not the expected shape
        """
        query = build_query(conditions_for(category), settings.bbox, self.limit, near=near)
        label = category.value if category else "all"
        if near is not None:
            logger.info(f"Querying Overpass for category={label} within {near.radius_m}m")
        else:
            logger.info(f"Querying Overpass for category={label}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, data={"data": query})
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Overpass returned {exc.response.status_code} for category={label}")
            raise UpstreamUnavailable(
                f"Geodata provider error: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            logger.error(f"Failed to reach Overpass: {exc}")
            raise UpstreamUnavailable(f"Failed to reach geodata provider: {exc}") from exc

        try:
            payload: Dict[str, Any] = response.json()
        except ValueError as exc:
            logger.error("Overpass returned a non-JSON body")
            raise UpstreamDataInvalid("Geodata provider returned malformed JSON") from exc

        records = parse_elements(payload, self.limit)
        logger.info(f"Overpass returned {len(records)} records for category={label}")
        return records


# Global instance
overpass_client = OverpassClient()

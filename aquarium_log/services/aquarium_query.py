"""
Aquarium Log Backend: Aquarium Query Composer
===============================================

What:  Builds the filtered, sorted, paginated aquarium listings behind
       GET /aquariums, GET /aquariums/search and GET /aquariums/nearby.
How:   Each listing step narrows or reorders the statement produced by
       the previous one, always in this order:

           prefecture filter → visited filter → sort → pagination

       Rows are then decorated by serializers.aquarium in one batch.
Who:   Called by routes/aquariums.py with the current user passed in
       explicitly (None for anonymous callers).

Sort keys:
    rating      AVG(visits.rating) desc, aquariums without ratings last
    visits      COUNT(visits.id) desc
    prefecture  fixed north-to-south prefecture order, unknown last, then name
    distance    nearest first within `distance` km (needs lat/lng, otherwise
                falls back to the default)
    (default)   created_at desc

Ties are broken by aquarium id so the same request twice gives the same
order.
"""

import logging
import math
from typing import List, Optional, Tuple

from sqlalchemy import Select, String, case, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.config import settings
from aquarium_log.constants import (
    MSG_LOCATION_REQUIRED,
    PREFECTURE_ORDER,
    SORT_DISTANCE,
    SORT_PREFECTURE,
    SORT_RATING,
    SORT_VISITS,
    UNKNOWN_PREFECTURE_ORDINAL,
)
from aquarium_log.exceptions import BadRequestError
from aquarium_log.models.aquarium import Aquarium
from aquarium_log.models.user import User
from aquarium_log.models.visit import Visit
from aquarium_log.schemas.aquarium import AquariumListResponse, NearbyResponse
from aquarium_log.serializers.aquarium import serialize_index
from aquarium_log.services.geo import bounding_box, order_by_distance, within_box
from aquarium_log.services.pagination import page_request, paginate, paginate_list

logger = logging.getLogger(__name__)


def prefecture_ordinal():
    """CASE expression mapping a prefecture to its north-to-south position."""
    return case(
        {name: index for index, name in enumerate(PREFECTURE_ORDER)},
        value=Aquarium.prefecture,
        else_=UNKNOWN_PREFECTURE_ORDINAL,
    )


def _parse_coordinate(value, limit: float) -> Optional[float]:
    """
    Float value of a lat/lng query parameter, or None when it is missing,
    blank, not a number or outside [-limit, limit].
    """
    if value is None:
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number) or abs(number) > limit:
        return None
    return number


def parse_origin(lat, lng) -> Tuple[Optional[float], Optional[float]]:
    return _parse_coordinate(lat, 90.0), _parse_coordinate(lng, 180.0)


class AquariumQuery:
    """
    Query composer for aquarium listings.

    Stateless: every method receives the session and the caller.
    """

    # ── Composition Steps ─────────────────────────────────────────────────

    def filter_prefecture(self, stmt: Select, prefecture: Optional[str]) -> Select:
        if prefecture is None or not prefecture.strip():
            return stmt
        return stmt.where(Aquarium.prefecture == prefecture.strip())

    def filter_visited(self, stmt: Select, user: Optional[User], visited: Optional[str]) -> Select:
        """
        visited=true keeps the caller's visited aquariums, any other value
        excludes them. No-op for anonymous callers or a missing parameter.
        """
        if user is None or visited is None or not str(visited).strip():
            return stmt
        visited_ids = select(Visit.aquarium_id).where(Visit.user_id == user.id)
        if str(visited).strip() == "true":
            return stmt.where(Aquarium.id.in_(visited_ids))
        return stmt.where(Aquarium.id.not_in(visited_ids))

    def apply_sort(self, stmt: Select, sort: Optional[str]) -> Select:
        """All sort keys except distance (see _distance_page)."""
        if sort == SORT_RATING:
            return (
                stmt.outerjoin(Visit, Visit.aquarium_id == Aquarium.id)
                .group_by(Aquarium.id)
                .order_by(func.avg(Visit.rating).desc().nulls_last(), Aquarium.id.asc())
            )
        if sort == SORT_VISITS:
            return (
                stmt.outerjoin(Visit, Visit.aquarium_id == Aquarium.id)
                .group_by(Aquarium.id)
                .order_by(func.count(Visit.id).desc(), Aquarium.id.asc())
            )
        if sort == SORT_PREFECTURE:
            return stmt.order_by(prefecture_ordinal(), Aquarium.name.asc(), Aquarium.id.asc())
        return stmt.order_by(Aquarium.created_at.desc(), Aquarium.id.desc())

    async def within_radius(
        self,
        db: AsyncSession,
        stmt: Select,
        lat: float,
        lng: float,
        radius_km: float,
    ) -> List[Aquarium]:
        """Rows of `stmt` within radius_km of (lat, lng), nearest first."""
        result = await db.execute(within_box(stmt, bounding_box(lat, lng, radius_km)))
        candidates = list(result.scalars().all())
        return [aquarium for aquarium, _ in order_by_distance(candidates, lat, lng, radius_km)]

    # ── Operations ────────────────────────────────────────────────────────

    async def list_aquariums(
        self,
        db: AsyncSession,
        user: Optional[User] = None,
        prefecture: Optional[str] = None,
        visited: Optional[str] = None,
        sort: Optional[str] = None,
        lat: Optional[str] = None,
        lng: Optional[str] = None,
        distance: Optional[float] = None,
        page: Optional[int] = None,
        per: Optional[int] = None,
    ) -> AquariumListResponse:
        """
        GET /aquariums.

        Example:
            GET /aquariums?prefecture=東京都&visited=false&sort=rating&page=2
            → aquariums in Tokyo the caller has not visited, best rated
              first, rows 21..40
        """
        request = page_request(page, per)
        stmt = select(Aquarium)
        stmt = self.filter_prefecture(stmt, prefecture)
        stmt = self.filter_visited(stmt, user, visited)

        origin = parse_origin(lat, lng)
        if sort == SORT_DISTANCE and None not in origin:
            radius = distance or settings.default_search_radius_km
            rows = await self.within_radius(db, stmt, origin[0], origin[1], radius)
            aquariums, pagination = paginate_list(rows, request)
        else:
            if sort == SORT_DISTANCE:
                logger.debug("Distance sort without lat/lng, using default order")
            stmt = self.apply_sort(stmt, sort)
            aquariums, pagination = await paginate(db, stmt, request)

        logger.debug(
            "Listed %d aquariums (sort=%s, prefecture=%s, visited=%s, page=%d)",
            len(aquariums), sort, prefecture, visited, request.page,
        )
        return AquariumListResponse(
            aquariums=await serialize_index(db, aquariums, user),
            pagination=pagination,
        )

    async def search(
        self,
        db: AsyncSession,
        user: Optional[User] = None,
        q: Optional[str] = None,
        exhibit: Optional[str] = None,
        page: Optional[int] = None,
        per: Optional[int] = None,
    ) -> AquariumListResponse:
        """
        GET /aquariums/search: substring match on name OR address.

        A blank `q` returns no rows and no pagination. `exhibit` further
        keeps aquariums with a visit whose good exhibits contain it.
        """
        if q is None or not q.strip():
            return AquariumListResponse(aquariums=[], pagination=None)

        request = page_request(page, per)
        stmt = select(Aquarium).where(
            or_(
                Aquarium.name.contains(q, autoescape=True),
                Aquarium.address.contains(q, autoescape=True),
            )
        )
        if exhibit is not None and exhibit.strip():
            # good_exhibits is stored as JSON text, so a substring match on
            # the serialized list finds the exhibit
            matching_visits = select(Visit.aquarium_id).where(
                cast(Visit.good_exhibits, String).contains(exhibit.strip(), autoescape=True)
            )
            stmt = stmt.where(Aquarium.id.in_(matching_visits))
        stmt = stmt.order_by(Aquarium.id.asc())

        aquariums, pagination = await paginate(db, stmt, request)
        return AquariumListResponse(
            aquariums=await serialize_index(db, aquariums, user),
            pagination=pagination,
        )

    async def nearby(
        self,
        db: AsyncSession,
        user: Optional[User] = None,
        lat: Optional[str] = None,
        lng: Optional[str] = None,
        distance: Optional[float] = None,
    ) -> NearbyResponse:
        """
        GET /aquariums/nearby: every aquarium within `distance` km
        (default 50), nearest first, unpaginated.

        Raises: BadRequestError when lat or lng is missing, not a number or
                out of range.
        """
        origin = parse_origin(lat, lng)
        if None in origin:
            raise BadRequestError(
                message=MSG_LOCATION_REQUIRED,
                context={"lat": lat, "lng": lng},
            )
        radius = distance or settings.default_search_radius_km
        aquariums = await self.within_radius(db, select(Aquarium), origin[0], origin[1], radius)
        return NearbyResponse(aquariums=await serialize_index(db, aquariums, user))


# ── Singleton Instance ────────────────────────────────────────────────────
aquarium_query = AquariumQuery()

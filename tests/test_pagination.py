"""Tests for page/per normalization and pagination metadata."""

import pytest
from sqlalchemy import select

from aquarium_log.models.aquarium import Aquarium
from aquarium_log.schemas.common import PaginationMeta
from aquarium_log.services.pagination import page_request, paginate, paginate_list


class TestPageRequest:

    def test_defaults(self):
        assert page_request() == (1, 20)

    def test_page_below_one_becomes_one(self):
        assert page_request(0, 10).page == 1
        assert page_request(-3, 10).page == 1

    def test_per_capped(self):
        assert page_request(1, 1000).per == 100

    def test_offset(self):
        assert page_request(3, 10).offset == 20


class TestPaginationMeta:

    def test_middle_page(self):
        meta = PaginationMeta.build(page=2, per=10, total_count=25)
        assert meta.model_dump() == {
            "current_page": 2,
            "next_page": 3,
            "prev_page": 1,
            "total_pages": 3,
            "total_count": 25,
        }

    def test_last_page_has_no_next(self):
        meta = PaginationMeta.build(page=3, per=10, total_count=25)
        assert meta.next_page is None

    def test_empty_result(self):
        meta = PaginationMeta.build(page=1, per=20, total_count=0)
        assert meta.total_pages == 0
        assert meta.next_page is None
        assert meta.prev_page is None


class TestPaginate:

    @pytest.mark.asyncio
    async def test_paginate_statement(self, db_session, make_aquarium):
        for _ in range(5):
            await make_aquarium()

        rows, meta = await paginate(
            db_session, select(Aquarium).order_by(Aquarium.id), page_request(2, 2),
        )

        assert [a.name for a in rows] == ["Aquarium 3", "Aquarium 4"]
        assert meta.total_count == 5
        assert meta.total_pages == 3

    def test_paginate_list(self):
        window, meta = paginate_list(list(range(7)), page_request(4, 2))
        assert window == [6]
        assert meta.current_page == 4
        assert meta.next_page is None

"""
Tests for the query builder: plan construction, in-memory evaluation and
execution against the ORM.
"""

from datetime import datetime, timezone

import pytest

from apps.blog.models import Post
from apps.blog.services import CATEGORY_QUERY, POST_QUERY
from apps.gallery.services import IMAGE_QUERY
from utils.query import EQUALS, HAS_TAG, SEARCH, apply_plan, build_plan, evaluate_rows


class TestBuildPlan:
    def test_post_defaults(self):
        plan = build_plan(POST_QUERY)
        assert plan.predicates == ()
        assert plan.order_field == "created_at"
        assert plan.descending is True
        assert (plan.page, plan.limit, plan.offset) == (1, 10, 0)

    def test_category_default_is_name_ascending(self):
        plan = build_plan(CATEGORY_QUERY)
        assert plan.order_field == "name"
        assert plan.descending is False

    def test_unknown_sort_falls_back(self):
        plan = build_plan(POST_QUERY, sort_by="password", sort_order="asc")
        assert plan.order_field == "created_at"
        assert plan.descending is True

    def test_unknown_sort_order_falls_back(self):
        plan = build_plan(POST_QUERY, sort_by="title", sort_order="sideways")
        assert plan.order_field == "title"
        assert plan.descending is True

    def test_sort_order_case_insensitive(self):
        plan = build_plan(IMAGE_QUERY, sort_by="size", sort_order="ASC")
        assert plan.order_field == "size"
        assert plan.descending is False

    def test_filters_combine(self):
        plan = build_plan(
            POST_QUERY,
            {"category": "Writing", "status": "draft", "tag": "python", "search": " hello "},
        )
        ops = {(p.op, p.fields) for p in plan.predicates}
        assert (EQUALS, ("category",)) in ops
        assert (EQUALS, ("status",)) in ops
        assert (HAS_TAG, ("tags",)) in ops
        assert (SEARCH, ("title", "excerpt", "content")) in ops
        search = next(p for p in plan.predicates if p.op == SEARCH)
        assert search.value == "hello"

    def test_status_all_and_blank_values_ignored(self):
        plan = build_plan(POST_QUERY, {"status": "all", "category": "", "search": "   ", "tag": None})
        assert plan.predicates == ()

    def test_unsupported_filters_ignored(self):
        plan = build_plan(CATEGORY_QUERY, {"tag": "x", "status": "draft"})
        assert plan.predicates == ()

    def test_created_alias_defaults_to_newest_first(self):
        plan = build_plan(CATEGORY_QUERY, sort_by="created")
        assert plan.order_field == "created_at"
        assert plan.descending is True

        plan = build_plan(CATEGORY_QUERY, sort_by="created", sort_order="asc")
        assert plan.descending is False

    def test_offset(self):
        plan = build_plan(POST_QUERY, page=3, limit=10)
        assert plan.offset == 20

    def test_paging_clamped_without_raising(self):
        plan = build_plan(POST_QUERY, page=0, limit=500)
        assert (plan.page, plan.limit) == (1, 100)
        plan = build_plan(POST_QUERY, page="abc", limit=None)
        assert (plan.page, plan.limit) == (1, 10)


ROWS = [
    {"id": 1, "title": "Banana bread", "excerpt": "Baking", "content": "", "tags": ["food", "baking"], "views": 5, "published_at": None, "status": "draft"},
    {"id": 2, "title": "apple pie", "excerpt": "More BAKING", "content": "", "tags": ["food"], "views": 9, "published_at": datetime(2024, 1, 2, tzinfo=timezone.utc), "status": "published"},
    {"id": 3, "title": "Cherry", "excerpt": "Fruit", "content": "bakingly", "tags": ["foodie"], "views": 1, "published_at": datetime(2024, 1, 1, tzinfo=timezone.utc), "status": "published"},
]


class TestEvaluateRows:
    def test_search_is_case_insensitive_across_fields(self):
        plan = build_plan(POST_QUERY, {"search": "baking"})
        rows, total = evaluate_rows(ROWS, plan)
        assert total == 3

    def test_tag_is_exact_element_match(self):
        plan = build_plan(POST_QUERY, {"tag": "food"})
        rows, total = evaluate_rows(ROWS, plan)
        assert sorted(r["id"] for r in rows) == [1, 2]
        assert total == 2

    def test_equals_and_search_combine(self):
        plan = build_plan(POST_QUERY, {"status": "published", "search": "baking"})
        rows, total = evaluate_rows(ROWS, plan)
        assert {r["id"] for r in rows} == {2, 3}

    def test_sort_by_views(self):
        plan = build_plan(POST_QUERY, sort_by="views", sort_order="desc")
        rows, _ = evaluate_rows(ROWS, plan)
        assert [r["id"] for r in rows] == [2, 1, 3]

    def test_nulls_sort_last_both_ways(self):
        for order in ("asc", "desc"):
            plan = build_plan(POST_QUERY, sort_by="publishedAt", sort_order=order)
            rows, _ = evaluate_rows(ROWS, plan)
            assert rows[-1]["id"] == 1

    def test_ties_broken_by_ascending_id(self):
        rows = [{"id": n, "views": 5} for n in (3, 1, 2)]
        for order in ("asc", "desc"):
            plan = build_plan(POST_QUERY, sort_by="views", sort_order=order)
            ordered, _ = evaluate_rows(rows, plan)
            assert [r["id"] for r in ordered] == [1, 2, 3]

    def test_window(self):
        plan = build_plan(POST_QUERY, sort_by="views", sort_order="asc", page=2, limit=2)
        rows, total = evaluate_rows(ROWS, plan)
        assert total == 3
        assert [r["id"] for r in rows] == [2]

    def test_page_past_end_is_empty(self):
        plan = build_plan(POST_QUERY, page=5, limit=2)
        rows, total = evaluate_rows(ROWS, plan)
        assert rows == []
        assert total == 3


@pytest.mark.django_db
class TestApplyPlan:
    def test_tag_filter_in_store_is_exact(self, make_post):
        make_post(tags=["python", "django"])
        make_post(tags=["py"])
        make_post(tags=["pythonic"])

        rows, total = apply_plan(Post.objects.all(), build_plan(POST_QUERY, {"tag": "python"}))
        assert total == 1
        assert rows[0].tags == ["python", "django"]

    def test_store_and_memory_agree(self, make_post):
        make_post(title="Alpha", content="Hello there", views=3)
        make_post(title="beta", excerpt="HELLO", views=7)
        make_post(title="Gamma", content="nothing", views=5)

        plan = build_plan(POST_QUERY, {"search": "hello"}, sort_by="views", sort_order="desc")
        stored, stored_total = apply_plan(Post.objects.all(), plan)
        in_memory, memory_total = evaluate_rows(list(Post.objects.all()), plan)

        assert stored_total == memory_total == 2
        assert [p.title for p in stored] == [p.title for p in in_memory] == ["beta", "Alpha"]

    def test_store_and_memory_agree_on_ties(self, make_post):
        for n in range(6):
            make_post(views=5 if n % 2 else 9)

        for order in ("asc", "desc"):
            plan = build_plan(POST_QUERY, {"status": "published"}, "views", order, 1, 4)
            stored, _ = apply_plan(Post.objects.all(), plan)
            in_memory, _ = evaluate_rows(list(Post.objects.all()), plan)
            assert [p.pk for p in stored] == [p.pk for p in in_memory]


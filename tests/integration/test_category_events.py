from datetime import datetime, timezone

import pytest

from pingpanel.core.errors import CategoryNotFound
from pingpanel.services.analytics import CategoryAnalyticsService
from pingpanel.services.windows import TimeRange

UTC = timezone.utc
# Wednesday
NOW = datetime(2024, 3, 13, 15, 0, tzinfo=UTC)


@pytest.fixture
def march_events(sale_category, add_events):
    async def _add():
        return await add_events(
            sale_category,
            (datetime(2024, 2, 28, 12, 0, tzinfo=UTC), {"amount": 100, "legacy": "yes"}),
            (datetime(2024, 3, 1, 0, 0, tzinfo=UTC), {"amount": 2, "seats": 3}),
            (datetime(2024, 3, 10, 0, 0, tzinfo=UTC), {"amount": 4, "coupon": "SPRING"}),
            (datetime(2024, 3, 11, 9, 0, tzinfo=UTC), {"amount": 5.5, "trial": True}),
            (datetime(2024, 3, 13, 10, 0, tzinfo=UTC), {"amount": 10, "plan": "pro"}),
        )
    return _add


@pytest.mark.asyncio
async def test_month_window(db, user, march_events):
    await march_events()

    result = await CategoryAnalyticsService(db).get_events_by_category_name(
        user, "sale", page=1, limit=30, time_range=TimeRange.MONTH, now=NOW
    )

    assert result["events_count"] == 4
    assert [event.fields["amount"] for event in result["events"]] == [10, 5.5, 4, 2]
    # amount, seats, coupon, trial, plan
    assert result["unique_field_count"] == 5
    assert result["numeric_field_sums"]["amount"] == {
        "total": 21.5,
        "this_week": 19.5,
        "this_month": 21.5,
        "today": 10,
    }
    assert result["numeric_field_sums"]["seats"]["total"] == 3
    assert "trial" not in result["numeric_field_sums"]
    assert "legacy" not in result["numeric_field_sums"]


@pytest.mark.asyncio
async def test_week_window_includes_sunday_midnight(db, user, march_events):
    await march_events()

    result = await CategoryAnalyticsService(db).get_events_by_category_name(
        user, "sale", time_range=TimeRange.WEEK, now=NOW
    )

    assert result["events_count"] == 3
    assert result["unique_field_count"] == 4
    assert result["numeric_field_sums"]["amount"]["total"] == 19.5
    assert "seats" not in result["numeric_field_sums"]


@pytest.mark.asyncio
async def test_today_window(db, user, march_events):
    await march_events()

    result = await CategoryAnalyticsService(db).get_events_by_category_name(
        user, "sale", time_range=TimeRange.TODAY, now=NOW
    )

    assert result["events_count"] == 1
    assert result["unique_field_count"] == 2
    assert result["numeric_field_sums"] == {
        "amount": {"total": 10, "this_week": 10, "this_month": 10, "today": 10}
    }


@pytest.mark.asyncio
async def test_week_spanning_month_boundary(db, user, sale_category, add_events):
    # Saturday 2024-03-02: the week started on Sunday 2024-02-25
    now = datetime(2024, 3, 2, 12, 0, tzinfo=UTC)
    await add_events(
        sale_category,
        (datetime(2024, 2, 26, 8, 0, tzinfo=UTC), {"amount": 7}),
        (datetime(2024, 3, 1, 8, 0, tzinfo=UTC), {"amount": 3}),
    )

    result = await CategoryAnalyticsService(db).get_events_by_category_name(
        user, "sale", time_range=TimeRange.WEEK, now=now
    )

    assert result["events_count"] == 2
    assert result["numeric_field_sums"]["amount"] == {
        "total": 10,
        "this_week": 10,
        "this_month": 3,
        "today": 0,
    }


@pytest.mark.asyncio
async def test_pagination_counts_whole_window(db, user, march_events):
    await march_events()
    service = CategoryAnalyticsService(db)

    first = await service.get_events_by_category_name(
        user, "sale", page=1, limit=3, time_range=TimeRange.MONTH, now=NOW
    )
    second = await service.get_events_by_category_name(
        user, "sale", page=2, limit=3, time_range=TimeRange.MONTH, now=NOW
    )
    beyond = await service.get_events_by_category_name(
        user, "sale", page=3, limit=3, time_range=TimeRange.MONTH, now=NOW
    )

    assert [event.fields["amount"] for event in first["events"]] == [10, 5.5, 4]
    assert [event.fields["amount"] for event in second["events"]] == [2]
    assert beyond["events"] == []
    assert first["events_count"] == second["events_count"] == beyond["events_count"] == 4
    assert first["numeric_field_sums"] == second["numeric_field_sums"]


@pytest.mark.asyncio
async def test_unknown_category_raises(db, user):
    with pytest.raises(CategoryNotFound):
        await CategoryAnalyticsService(db).get_events_by_category_name(user, "missing", now=NOW)


@pytest.fixture
def frozen_now(monkeypatch):
    monkeypatch.setattr("pingpanel.services.analytics.local_now", lambda tz=None: NOW)
    return NOW


@pytest.mark.asyncio
async def test_events_endpoint(client, user, sale_category, add_events, identity_headers, frozen_now):
    await add_events(
        sale_category,
        (datetime(2024, 2, 27, 9, 0, tzinfo=UTC), {"amount": 1000}),
        (datetime(2024, 3, 13, 9, 0, tzinfo=UTC), {"amount": 10, "plan": "pro"}),
        (datetime(2024, 3, 13, 10, 0, tzinfo=UTC), {"amount": 20}),
        (datetime(2024, 3, 13, 11, 0, tzinfo=UTC), {"amount": 30, "paid": True}),
    )

    response = await client.get(
        "/categories/sale/events?time_range=month&page=1&limit=2",
        headers=identity_headers
    )
    assert response.status_code == 200
    data = response.json()

    assert data["events_count"] == 3
    assert data["unique_field_count"] == 3
    assert [event["fields"]["amount"] for event in data["events"]] == [30, 20]
    assert data["events"][0]["fields"]["paid"] is True
    assert data["events"][0]["name"] == "sale"
    assert data["events"][0]["delivery_status"] == "PENDING"
    assert data["numeric_field_sums"]["amount"]["total"] == 60
    assert data["numeric_field_sums"]["amount"]["today"] == 60
    assert "paid" not in data["numeric_field_sums"]


@pytest.mark.asyncio
async def test_events_endpoint_defaults_to_today(client, user, sale_category, add_events, identity_headers, frozen_now):
    await add_events(
        sale_category,
        (datetime(2024, 3, 12, 23, 59, tzinfo=UTC), {"amount": 1}),
        (datetime(2024, 3, 13, 0, 0, tzinfo=UTC), {"amount": 2}),
    )

    response = await client.get("/categories/sale/events", headers=identity_headers)
    assert response.status_code == 200
    assert response.json()["events_count"] == 1


@pytest.mark.asyncio
async def test_events_endpoint_returns_stored_payloads_as_is(
        client, user, sale_category, add_events, identity_headers, frozen_now
):
    # imported rows may hold nulls, nested objects or no object at all
    await add_events(
        sale_category,
        (datetime(2024, 3, 13, 9, 0, tzinfo=UTC), {"amount": 5, "note": None, "meta": {"a": 1}}),
        (datetime(2024, 3, 13, 10, 0, tzinfo=UTC), [1, 2]),
        (datetime(2024, 3, 13, 11, 0, tzinfo=UTC), "text"),
    )

    response = await client.get("/categories/sale/events?time_range=month", headers=identity_headers)
    assert response.status_code == 200
    data = response.json()

    assert [event["fields"] for event in data["events"]] == [
        "text",
        [1, 2],
        {"amount": 5, "note": None, "meta": {"a": 1}},
    ]
    assert data["events_count"] == 3
    assert data["unique_field_count"] == 3
    assert data["numeric_field_sums"] == {
        "amount": {"total": 5, "this_week": 5, "this_month": 5, "today": 5}
    }


@pytest.mark.asyncio
async def test_dashboard_routes_ignore_name_case(client, user, sale_category, add_events, identity_headers, frozen_now):
    await add_events(sale_category, (datetime(2024, 3, 13, 9, 0, tzinfo=UTC), {"amount": 5}))

    response = await client.get("/categories/Sale/events", headers=identity_headers)
    assert response.status_code == 200
    assert response.json()["events_count"] == 1

    response = await client.get("/categories/SALE/poll", headers=identity_headers)
    assert response.json() == {"has_events": True}

    response = await client.delete("/categories/Sale", headers=identity_headers)
    assert response.status_code == 200

    response = await client.get("/categories/sale/poll", headers=identity_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [
    "limit=51",
    "limit=0",
    "page=0",
    "time_range=year",
])
async def test_events_endpoint_validation(client, user, sale_category, identity_headers, query):
    response = await client.get(f"/categories/sale/events?{query}", headers=identity_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_events_endpoint_unknown_category(client, user, identity_headers):
    response = await client.get("/categories/missing/events", headers=identity_headers)
    assert response.status_code == 404

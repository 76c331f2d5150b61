"""
HTTP surface tests: status codes, camelCase payloads and error bodies.
"""

from datetime import time

from backoffice.extensions import db
from backoffice.models import Item, Sale
from backoffice.services import attendance_service, sales_service
from backoffice.time_utils import local_today


def test_health(client, db_session):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.get_json()
    assert body["checks"]["database"]["status"] == "healthy"
    assert body["checks"]["attendance_scheduler"]["status"] == "disabled"


def test_time_in_then_time_out(client, db_session, cashier):
    response = client.post("/api/attendances/time-in", json={
        "userId": cashier.id, "date": "2024-01-15", "timeIn": "09:00",
    })
    assert response.status_code == 201
    opened = response.get_json()
    assert opened["status"] == "OPEN"
    assert opened["timeOut"] is None
    assert opened["attendanceDate"] == "2024-01-15"
    assert opened["fullName"] == "Casey Cashier"

    response = client.post("/api/attendances/time-out", json={
        "userId": cashier.id, "date": "2024-01-15", "timeOut": "17:30",
    })
    assert response.status_code == 200
    closed = response.get_json()
    assert closed["id"] == opened["id"]
    assert closed["timeOut"] == "17:30:00"
    assert closed["totalHours"] == 8.5


def test_time_out_errors_are_400(client, db_session, cashier):
    response = client.post("/api/attendances/time-out", json={
        "userId": cashier.id, "date": "2024-01-15", "timeOut": "17:30",
    })
    assert response.status_code == 400
    assert "No open time-in" in response.get_json()["error"]

    client.post("/api/attendances/time-in", json={"userId": cashier.id, "date": "2024-01-15", "timeIn": "09:00"})
    response = client.post("/api/attendances/time-out", json={
        "userId": cashier.id, "date": "2024-01-15", "timeOut": "08:00",
    })
    assert response.status_code == 400
    assert response.get_json()["error"] == "Time-out cannot be before time-in"


def test_time_in_validation(client, db_session):
    response = client.post("/api/attendances/time-in", json={"userId": 1, "date": "2024-01-15"})
    assert response.status_code == 400
    assert "timeIn" in response.get_json()["error"]

    response = client.post("/api/attendances/time-in", json={"userId": 999, "date": "2024-01-15", "timeIn": "09:00"})
    assert response.status_code == 400
    assert "User not found" in response.get_json()["error"]


def test_weekly_reports(client, db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=local_today(), time_in=time(0, 0))
    attendance_service.mark_time_out(user_id=cashier.id, attendance_date=local_today(), time_out=time(1, 15))
    week_start = attendance_service.get_week_start(local_today()).isoformat()

    response = client.get(f"/api/attendances/weekly-report?weekStart={week_start}")
    assert response.status_code == 200
    assert response.get_json() == [{"userId": cashier.id, "fullName": "Casey Cashier", "totalHours": 1.25}]

    response = client.get(f"/api/attendances/weekly-report/user/{cashier.id}?weekStart=2000-01-03")
    assert response.get_json() == {"userId": cashier.id, "weekStart": "2000-01-03", "totalHours": 0.0}

    response = client.get("/api/attendances/week-start?date=2024-01-18")
    assert response.get_json() == {"weekStart": "2024-01-15"}

    response = client.get("/api/attendances/weekly-report")
    assert response.status_code == 400


def test_attendance_listing_endpoints(client, db_session, cashier):
    attendance_service.mark_time_in(user_id=cashier.id, attendance_date=local_today(), time_in=time(8, 0))

    today = local_today().isoformat()
    assert len(client.get(f"/api/attendances/user/{cashier.id}/date/{today}").get_json()) == 1
    assert len(client.get(f"/api/attendances/date/{today}").get_json()) == 1
    response = client.get(f"/api/attendances/date-range?startDate={today}&endDate={today}")
    assert len(response.get_json()) == 1
    response = client.get(f"/api/attendances/user/{cashier.id}/date-range?startDate={today}&endDate={today}")
    assert len(response.get_json()) == 1

    response = client.post("/api/attendances/auto-time-out")
    assert response.status_code == 200
    assert response.get_json() == {"closed": 1}


def test_create_sale_endpoint(client, db_session, cashier, make_item):
    item = make_item("Juice", stock=10, price="2.50")

    response = client.post("/api/sales", json={
        "paymentMethod": "CASH",
        "userId": cashier.id,
        "saleItems": [{"itemId": item.id, "quantity": 3, "unitPrice": 2.50, "totalPrice": 7.50}],
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body["totalAmount"] == 7.5
    assert body["saleItems"][0]["itemName"] == "Juice"
    assert body["saleItems"][0]["vatAmount"] == 1.4
    db.session.expire_all()
    assert db.session.get(Item, item.id).stock_quantity == 7


def test_create_sale_insufficient_stock_is_400(client, db_session, make_item):
    item = make_item("Eggs", stock=5)

    response = client.post("/api/sales", json={
        "paymentMethod": "CASH",
        "saleItems": [{"itemId": item.id, "quantity": 6, "unitPrice": 1.0}],
    })

    assert response.status_code == 400
    assert "Insufficient stock" in response.get_json()["error"]
    db.session.expire_all()
    assert db.session.get(Item, item.id).stock_quantity == 5
    assert db.session.query(Sale).count() == 0


def test_create_sale_rejects_missing_lines(client, db_session):
    response = client.post("/api/sales", json={"paymentMethod": "CASH"})
    assert response.status_code == 400


def test_get_update_delete_sale(client, db_session, make_item):
    item = make_item("Tea", stock=10)
    sale = sales_service.create_sale(
        payment_method="CASH",
        line_items=[{"item_id": item.id, "quantity": 2, "unit_price": "3.00"}],
    )
    sale_id = sale.id

    assert client.get(f"/api/sales/{sale_id}").status_code == 200
    assert client.get("/api/sales/999").status_code == 404

    response = client.put(f"/api/sales/{sale_id}", json={
        "paymentMethod": "CARD",
        "saleItems": [{"itemId": item.id, "quantity": 5, "unitPrice": 3.0}],
    })
    assert response.status_code == 200
    assert response.get_json()["totalAmount"] == 15.0
    db.session.expire_all()
    assert db.session.get(Item, item.id).stock_quantity == 5

    response = client.delete(f"/api/sales/{sale_id}")
    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(Item, item.id).stock_quantity == 10

    assert client.delete(f"/api/sales/{sale_id}").status_code == 400


def test_sales_daily_report_and_queries(client, db_session, cashier):
    for method, price in [("CASH", 4.0), ("CARD", 6.5)]:
        client.post("/api/sales", json={
            "paymentMethod": method,
            "userId": cashier.id,
            "saleItems": [{"quantity": 1, "unitPrice": price}],
        })
    today = local_today().isoformat()

    report = client.get(f"/api/sales/daily-report?date={today}").get_json()
    assert report == {
        "reportDate": today,
        "totalSales": 2,
        "totalAmount": 10.5,
        "cashSales": 1,
        "cashAmount": 4.0,
        "cardSales": 1,
        "cardAmount": 6.5,
    }

    mine = client.get(f"/api/sales/daily-report/user?date={today}&userId={cashier.id}").get_json()
    assert mine["totalSales"] == 2

    assert len(client.get("/api/sales").get_json()) == 2
    assert len(client.get(f"/api/sales/user/{cashier.id}").get_json()) == 2
    assert len(client.get(f"/api/sales/today?userId={cashier.id}").get_json()) == 2
    assert len(client.get("/api/sales/today?isAdmin=true").get_json()) == 2
    assert client.get("/api/sales/today").status_code == 400

    start, end = f"{today}T00:00:00", f"{today}T23:59:59"
    assert len(client.get(f"/api/sales/date-range?startDate={start}&endDate={end}").get_json()) == 2
    assert client.get(f"/api/sales/total?startDate={start}&endDate={end}").get_json() == {"total": 10.5}


def test_reports_endpoints(client, db_session):
    sales_service.create_sale(
        payment_method="CASH",
        line_items=[{"item_id": None, "quantity": 1, "unit_price": "12.30"}],
    )
    today = local_today().isoformat()

    vat = client.get(f"/api/reports/vat-summary?date={today}").get_json()
    assert vat == [{"vatRate": 23.0, "gross": 12.3, "vatAmount": 2.3, "net": 10.0}]

    categories = client.get(f"/api/reports/category-summary?startDate={today}&endDate={today}").get_json()
    assert categories == [{"name": "Quick Sale", "total": 12.3, "count": 1}]

    assert client.get("/api/reports/vat-summary").status_code == 400


def test_stock_patch(client, db_session, make_item):
    item = make_item("Rice", stock=4)

    response = client.patch(f"/api/items/{item.id}/stock", json={"delta": -3})
    assert response.status_code == 200
    assert response.get_json()["stockQuantity"] == 1

    response = client.patch(f"/api/items/{item.id}/stock", json={"delta": -2})
    assert response.status_code == 400

    response = client.patch(f"/api/items/{item.id}/stock", json={"quantity": 12})
    assert response.get_json()["stockQuantity"] == 12

    assert client.patch(f"/api/items/{item.id}/stock", json={}).status_code == 400
    assert client.get("/api/items/999").status_code == 404


def test_missing_item_is_404_on_lookup_and_400_on_write(client, db_session):
    response = client.get("/api/items/999")
    assert response.status_code == 404
    assert "Item not found" in response.get_json()["error"]

    response = client.patch("/api/items/999/stock", json={"quantity": 3})
    assert response.status_code == 400
    assert "Item not found" in response.get_json()["error"]

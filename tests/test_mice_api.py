# tests/test_mice_api.py
from sqlalchemy import func, select

from backoffice.db import tables
from backoffice.db.core import read_connection


def _count(engine, table):
    with read_connection(engine) as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


def test_main_page_questions_are_replaced_wholesale(client):
    assert client.get("/api/mice/main").json() is None

    # first save needs a banner
    r = client.post("/api/mice/main", json={"questions": [{"question": "Q", "answer": "A"}]})
    assert r.status_code == 400
    assert _count(client.engine, tables.mice_main) == 0

    r = client.post(
        "/api/mice/main",
        json={
            "banner_image": "/uploads/mice/banner.jpg",
            "questions": [
                {"question": "Venues?", "answer": "Goa, Jaipur"},
                {"question": "  ", "answer": "dropped"},
                {"question": "Group size?", "answer": "20+"},
            ],
        },
    )
    assert r.status_code == 200, r.text
    assert r.json()["created"] is True
    assert r.json()["questions"] == 2
    page_id = r.json()["id"]

    new_set = {"questions": [{"question": "Visa help?", "answer": "Yes"}]}
    for _ in range(2):
        r = client.post("/api/mice/main", json=new_set)
        assert r.status_code == 200
        assert r.json() == {"id": page_id, "created": False, "questions": 1}

    page = client.get("/api/mice/main").json()
    assert page["banner_image"] == "/uploads/mice/banner.jpg"
    assert [(q["question"], q["display_order"]) for q in page["questions"]] == [("Visa help?", 0)]
    assert _count(client.engine, tables.mice_questions) == 1
    assert _count(client.engine, tables.mice_main) == 1


def test_package_create_edit_delete(client):
    r = client.post("/api/mice/packages", json={"days": "3N/4D", "price": 45000})
    assert r.status_code == 400

    r = client.post(
        "/api/mice/packages",
        json={"days": "3N/4D", "price": 45000, "images": ["/m/1.jpg", "/m/2.jpg"]},
    )
    assert r.status_code == 200, r.text
    assert r.json()["created"] is True
    package_id = r.json()["id"]

    # an edit adds images next to the stored ones
    r = client.post(
        "/api/mice/packages",
        json={"id": package_id, "days": "4N/5D", "price": 52000, "images": ["/m/3.jpg"]},
    )
    assert r.json() == {"id": package_id, "created": False, "images_added": 1}

    data = client.get(f"/api/mice/packages/{package_id}").json()
    assert data["days"] == "4N/5D"
    assert data["price"] == 52000
    assert [i["image_path"] for i in data["images"]] == ["/m/1.jpg", "/m/2.jpg", "/m/3.jpg"]

    listed = client.get("/api/mice/packages").json()
    assert [(p["id"], len(p["images"])) for p in listed] == [(package_id, 3)]

    r = client.post("/api/mice/packages", json={"id": 999, "days": "1D", "price": 1})
    assert r.status_code == 404

    r = client.delete(f"/api/mice/packages/{package_id}")
    assert r.status_code == 200
    assert r.json()["released_images"] == ["/m/1.jpg", "/m/2.jpg", "/m/3.jpg"]
    assert client.get(f"/api/mice/packages/{package_id}").status_code == 404
    assert _count(client.engine, tables.mice_package_images) == 0


def test_package_validation(client):
    assert client.post("/api/mice/packages", json={"days": "", "price": 1}).status_code == 422
    assert client.post("/api/mice/packages", json={"days": "2D", "price": 0}).status_code == 422
    r = client.post("/api/mice/packages", json={"days": "  ", "price": 10, "images": ["/m/x.jpg"]})
    assert r.status_code == 400
    assert _count(client.engine, tables.mice_packages) == 0

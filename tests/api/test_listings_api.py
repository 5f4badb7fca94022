"""HTTP tests for listing browsing, visibility and owner/admin writes."""

import uuid

from helpers import auth_headers, make_listing, make_user

PNG = ("coat.png", b"\x89PNG\r\n\x1a\n", "image/png")


def _form(**overrides):
    form = {
        "title": "Warm fleece",
        "description": "Barely used",
        "category": "פליזים",
        "transaction_type": "מסירה",
        "size": "M",
        "merhav": "שרון",
    }
    form.update(overrides)
    return form


def _titles(response):
    return {item["title"] for item in response.json()["listings"]}


class TestBrowse:
    def test_anonymous_sees_only_public_available(self, client, db, volunteer):
        make_listing(db, volunteer, title="Public coat")
        make_listing(db, volunteer, title="Volunteer boots", volunteer_only=True)
        make_listing(db, volunteer, title="Taken shirt", is_available=False)

        response = client.get("/api/listings")
        assert response.status_code == 200
        assert _titles(response) == {"Public coat"}

    def test_pending_volunteer_treated_as_user(self, client, db, volunteer, pending_user):
        make_listing(db, volunteer, title="Volunteer boots", volunteer_only=True)
        response = client.get("/api/listings", headers=auth_headers(pending_user))
        assert _titles(response) == set()

    def test_verified_volunteer_sees_restricted(self, client, db, volunteer):
        make_listing(db, volunteer, title="Public coat")
        make_listing(db, volunteer, title="Volunteer boots", volunteer_only=True)
        response = client.get("/api/listings", headers=auth_headers(volunteer))
        assert _titles(response) == {"Public coat", "Volunteer boots"}

    def test_invalid_token_browses_anonymously(self, client, db, volunteer):
        make_listing(db, volunteer, title="Volunteer boots", volunteer_only=True)
        response = client.get("/api/listings", headers={"Authorization": "Bearer broken"})
        assert response.status_code == 200
        assert _titles(response) == set()

    def test_newest_first_with_owner_contact(self, client, db, volunteer):
        make_listing(db, volunteer, title="Older")
        make_listing(db, volunteer, title="Newer")
        listings = client.get("/api/listings").json()["listings"]
        assert [item["title"] for item in listings] == ["Newer", "Older"]
        assert listings[0]["owner"]["phone"] == volunteer["phone"]

    def test_filters_and_search(self, client, db, volunteer):
        make_listing(db, volunteer, title="Blue coat", category="מעילים", merhav="דן")
        make_listing(db, volunteer, title="Red coat", category="מעילים", merhav="נגב")
        make_listing(db, volunteer, title="Hiking shoes", category="נעליים", merhav="דן")

        assert _titles(client.get("/api/listings", params={"category": "מעילים"})) == {"Blue coat", "Red coat"}
        assert _titles(client.get("/api/listings", params={"merhav": "דן", "category": "מעילים"})) == {"Blue coat"}
        assert _titles(client.get("/api/listings", params={"search": "COAT"})) == {"Blue coat", "Red coat"}
        assert _titles(client.get("/api/listings", params={"search": "hiking),(x"})) == set()


class TestSingleListing:
    def test_restricted_listing_is_forbidden_not_hidden(self, client, db, volunteer, regular_user):
        listing = make_listing(db, volunteer, volunteer_only=True)
        assert client.get(f"/api/listings/{listing['id']}").status_code == 403
        assert client.get(f"/api/listings/{listing['id']}", headers=auth_headers(regular_user)).status_code == 403
        response = client.get(f"/api/listings/{listing['id']}", headers=auth_headers(volunteer))
        assert response.status_code == 200
        assert response.json()["listing"]["owner"]["full_name"] == volunteer["full_name"]

    def test_unavailable_listing_still_fetchable(self, client, db, volunteer):
        listing = make_listing(db, volunteer, is_available=False)
        assert client.get(f"/api/listings/{listing['id']}").status_code == 200

    def test_unknown_listing(self, client):
        response = client.get(f"/api/listings/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_malformed_id(self, client):
        assert client.get("/api/listings/not-a-uuid").status_code == 400

    def test_increment_view(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        response = client.post(f"/api/listings/{listing['id']}/increment-view")
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert db.tables["listings"][0]["views"] == 1

    def test_increment_view_failure_is_soft(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        db.fail("listings", "update")
        response = client.post(f"/api/listings/{listing['id']}/increment-view")
        assert response.status_code == 200
        assert response.json() == {"success": False, "error": "Failed to increment view"}


class TestCreate:
    def test_volunteer_creates_with_image(self, client, db, storage, volunteer):
        response = client.post(
            "/api/listings",
            data=_form(volunteer_only="true"),
            files={"image1": PNG},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 201
        listing = response.json()["listing"]
        assert listing["owner_id"] == volunteer["id"]
        assert listing["volunteer_only"] is True
        assert listing["is_available"] is True
        assert listing["image1"].startswith("/images/uploaded/listing-")
        assert listing["image2"] is None
        assert len(list(storage.directory.iterdir())) == 1

    def test_admin_may_create(self, client, admin_user):
        response = client.post("/api/listings", data=_form(), headers=auth_headers(admin_user))
        assert response.status_code == 201
        assert response.json()["listing"]["volunteer_only"] is False

    def test_regular_and_pending_users_forbidden(self, client, db, regular_user, pending_user):
        for user in (regular_user, pending_user):
            response = client.post("/api/listings", data=_form(volunteer_only="true"), headers=auth_headers(user))
            assert response.status_code == 403
        assert db.tables["listings"] == []

    def test_anonymous_unauthenticated(self, client):
        assert client.post("/api/listings", data=_form()).status_code == 401

    def test_invalid_fields(self, client, volunteer):
        response = client.post(
            "/api/listings",
            data=_form(title="ab", category="Hats", transaction_type="sale"),
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 400
        fields = {d["field"] for d in response.json()["details"]}
        assert fields == {"title", "category", "transaction_type"}

    def test_missing_required_field(self, client, volunteer):
        form = _form()
        del form["merhav"]
        response = client.post("/api/listings", data=form, headers=auth_headers(volunteer))
        assert response.status_code == 400

    def test_non_image_upload_rejected(self, client, db, volunteer):
        response = client.post(
            "/api/listings",
            data=_form(),
            files={"image1": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 400
        assert db.tables["listings"] == []


class TestUpdateAndDelete:
    def test_owner_updates(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        response = client.patch(
            f"/api/listings/{listing['id']}",
            data={"title": "Renamed coat", "is_available": "false"},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 200
        assert response.json()["listing"]["title"] == "Renamed coat"
        assert response.json()["listing"]["is_available"] is False

        assert _titles(client.get("/api/listings")) == set()
        mine = client.get("/api/listings/my/listings", headers=auth_headers(volunteer))
        assert _titles(mine) == {"Renamed coat"}

    def test_other_volunteer_forbidden(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        stranger = make_user(db, "vol_other", role="verified_volunteer")
        response = client.patch(
            f"/api/listings/{listing['id']}", data={"title": "Mine now"}, headers=auth_headers(stranger)
        )
        assert response.status_code == 403
        assert db.tables["listings"][0]["title"] == "Winter coat"

    def test_admin_updates_any_listing(self, client, db, volunteer, admin_user):
        listing = make_listing(db, volunteer)
        response = client.patch(
            f"/api/listings/{listing['id']}", data={"volunteer_only": "true"}, headers=auth_headers(admin_user)
        )
        assert response.status_code == 200
        assert response.json()["listing"]["volunteer_only"] is True

    def test_replace_and_remove_images(self, client, db, storage, volunteer):
        created = client.post(
            "/api/listings", data=_form(), files={"image1": PNG, "image2": PNG}, headers=auth_headers(volunteer)
        ).json()["listing"]

        response = client.patch(
            f"/api/listings/{created['id']}",
            data={"removeImage1": "true", "removeImage2": "true"},
            files={"image2": ("new.jpg", b"\xff\xd8\xff", "image/jpeg")},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 200
        updated = response.json()["listing"]
        assert updated["image1"] is None
        assert updated["image2"].endswith(".jpg")
        assert [p.name for p in storage.directory.iterdir()] == [updated["image2"].rsplit("/", 1)[1]]

    def test_empty_values_clear_optional_text(self, client, db, volunteer):
        listing = make_listing(db, volunteer, description="Warm and dry", size="L")
        response = client.patch(
            f"/api/listings/{listing['id']}",
            data={"description": "", "size": ""},
            headers=auth_headers(volunteer),
        )
        assert response.status_code == 200
        assert response.json()["listing"]["description"] is None
        assert response.json()["listing"]["size"] is None
        assert db.tables["listings"][0]["title"] == "Winter coat"

    def test_empty_update_rejected(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        response = client.patch(f"/api/listings/{listing['id']}", data={}, headers=auth_headers(volunteer))
        assert response.status_code == 400

    def test_update_unknown_listing(self, client, volunteer):
        response = client.patch(f"/api/listings/{uuid.uuid4()}", data={"title": "Whatever"}, headers=auth_headers(volunteer))
        assert response.status_code == 404

    def test_owner_deletes(self, client, db, volunteer):
        listing = make_listing(db, volunteer)
        response = client.delete(f"/api/listings/{listing['id']}", headers=auth_headers(volunteer))
        assert response.status_code == 200
        assert db.tables["listings"] == []
        assert client.delete(f"/api/listings/{listing['id']}", headers=auth_headers(volunteer)).status_code == 404

    def test_non_owner_cannot_delete(self, client, db, volunteer, regular_user):
        listing = make_listing(db, volunteer)
        response = client.delete(f"/api/listings/{listing['id']}", headers=auth_headers(regular_user))
        assert response.status_code == 403
        assert len(db.tables["listings"]) == 1

    def test_admin_deletes_any_listing(self, client, db, volunteer, admin_user):
        listing = make_listing(db, volunteer)
        assert client.delete(f"/api/listings/{listing['id']}", headers=auth_headers(admin_user)).status_code == 200

    def test_my_listings_requires_auth(self, client):
        assert client.get("/api/listings/my/listings").status_code == 401

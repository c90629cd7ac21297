from boost_portal.db.enums import UserRoleEnum
from boost_portal.db.models import CompanyAccountId, UserProfile

SUPER = ("ops", "ops@boostdata.io")


def test_only_super_admin_creates_companies(api_client, seed):
    company = seed.company("Acme")
    seed.profile("alice", company=company, role=UserRoleEnum.admin)

    denied = api_client.post("/companies", headers=seed.headers("alice"), json={"name": "Globex"})
    created = api_client.post("/companies", headers=seed.headers(*SUPER), json={"name": "  Globex  "})
    duplicate = api_client.post("/companies", headers=seed.headers(*SUPER), json={"name": "Globex"})

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json()["name"] == "Globex"
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "A company with this name already exists"


def test_company_admin_renames_but_cannot_change_account_id(api_client, seed):
    company = seed.company("Acme", account_id="act_1")
    seed.profile("alice", company=company, role=UserRoleEnum.admin)
    seed.profile("bob", company=company)
    url = f"/companies/{company.id}"

    renamed = api_client.patch(url, headers=seed.headers("alice"), json={"name": "Acme Media"})
    account = api_client.patch(url, headers=seed.headers("alice"), json={"account_id": "act_2"})
    member = api_client.patch(url, headers=seed.headers("bob"), json={"name": "Bob Co"})
    same_account = api_client.patch(url, headers=seed.headers("alice"), json={"account_id": "act_1"})

    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Acme Media"
    assert account.status_code == 403
    assert account.json()["rules"][0]["rule"] == "company_update_admin_keeps_account_id"
    assert member.status_code == 403
    assert same_account.status_code == 200

    by_super = api_client.patch(url, headers=seed.headers(*SUPER), json={"account_id": "act_2"})
    assert by_super.json()["account_id"] == "act_2"


def test_other_companies_are_invisible(api_client, seed):
    acme = seed.company("Acme")
    globex = seed.company("Globex")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)

    listed = api_client.get("/companies", headers=seed.headers("alice")).json()

    assert [row["name"] for row in listed] == ["Acme"]
    assert api_client.get(f"/companies/{globex.id}", headers=seed.headers("alice")).status_code == 404
    assert api_client.get(f"/companies/{globex.id}/members", headers=seed.headers("alice")).status_code == 404
    assert len(api_client.get("/companies", headers=seed.headers(*SUPER)).json()) == 2


def test_members_listing(api_client, seed):
    acme = seed.company("Acme")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)
    seed.profile("bob", company=acme)

    resp = api_client.get(f"/companies/{acme.id}/members", headers=seed.headers("bob"))

    assert sorted(row["id"] for row in resp.json()) == ["alice", "bob"]


def test_delete_company_moves_members_to_limbo(api_client, seed, db_session):
    acme = seed.company("Acme")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)
    db_session.add(CompanyAccountId(company_id=acme.id, platform="meta", account_id="act_1"))
    db_session.commit()

    assert api_client.delete(f"/companies/{acme.id}", headers=seed.headers("alice")).status_code == 403
    assert api_client.delete(f"/companies/{acme.id}", headers=seed.headers(*SUPER)).status_code == 204

    db_session.expire_all()
    assert db_session.get(UserProfile, "alice").company_id is None
    assert db_session.query(CompanyAccountId).count() == 0


def test_account_id_insert_denied_for_user_allowed_for_admin_and_super_admin(api_client, seed):
    acme = seed.company("Acme")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)
    seed.profile("bob", company=acme)
    url = f"/companies/{acme.id}/account-ids"

    by_user = api_client.post(url, headers=seed.headers("bob"), json={"platform": "meta", "account_id": "act_1"})
    by_admin = api_client.post(url, headers=seed.headers("alice"), json={"platform": "meta", "account_id": "act_1"})
    by_super = api_client.post(url, headers=seed.headers(*SUPER), json={"platform": "tiktok", "account_id": "tt_1"})
    duplicate = api_client.post(url, headers=seed.headers("alice"), json={"platform": "meta", "account_id": "act_1"})

    assert by_user.status_code == 403
    assert by_admin.status_code == 201
    assert by_super.status_code == 201
    assert duplicate.status_code == 409

    listed = api_client.get(url, headers=seed.headers("bob")).json()
    assert sorted(row["platform"] for row in listed) == ["meta", "tiktok"]


def test_account_ids_of_other_company(api_client, seed):
    acme = seed.company("Acme")
    globex = seed.company("Globex")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)
    seed.profile("gabe", company=globex, role=UserRoleEnum.admin)
    created = api_client.post(
        f"/companies/{acme.id}/account-ids",
        headers=seed.headers("alice"),
        json={"platform": "meta", "account_id": "act_1"},
    ).json()

    assert api_client.get(f"/companies/{acme.id}/account-ids", headers=seed.headers("gabe")).json() == []
    assert (
        api_client.post(
            f"/companies/{acme.id}/account-ids",
            headers=seed.headers("gabe"),
            json={"platform": "meta", "account_id": "act_9"},
        ).status_code
        == 403
    )
    assert api_client.patch(
        f"/account-ids/{created['id']}", headers=seed.headers("gabe"), json={"is_active": False}
    ).status_code == 404


def test_account_id_update_and_delete(api_client, seed):
    acme = seed.company("Acme")
    seed.profile("alice", company=acme, role=UserRoleEnum.admin)
    seed.profile("bob", company=acme)
    created = api_client.post(
        f"/companies/{acme.id}/account-ids",
        headers=seed.headers("alice"),
        json={"platform": "meta", "account_id": "act_1"},
    ).json()
    record_url = f"/account-ids/{created['id']}"

    assert api_client.patch(record_url, headers=seed.headers("bob"), json={"is_active": False}).status_code == 403
    deactivated = api_client.patch(record_url, headers=seed.headers("alice"), json={"is_active": False})
    assert deactivated.json()["is_active"] is False

    listing_url = f"/companies/{acme.id}/account-ids"
    assert api_client.get(listing_url, headers=seed.headers("bob")).json() == []
    assert len(api_client.get(f"{listing_url}?include_inactive=true", headers=seed.headers("bob")).json()) == 1

    assert api_client.delete(record_url, headers=seed.headers("alice")).status_code == 204
    assert api_client.get(f"{listing_url}?include_inactive=true", headers=seed.headers("alice")).json() == []

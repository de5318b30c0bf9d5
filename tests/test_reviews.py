from datetime import datetime, timedelta

from bson import ObjectId


def _add(client, ticket, text, headers):
    return client.post(f"/tickets/{ticket['_id']}/reviews", json={"text": text}, headers=headers)


def test_add_review_forces_author(client, signup, make_ticket):
    alice, headers = signup("alice")
    ticket = make_ticket(headers)

    res = client.post(
        f"/tickets/{ticket['_id']}/reviews",
        json={"text": "Any news?", "author_id": "someone-else"},
        headers=headers,
    )
    assert res.status_code == 201
    review = res.json()
    assert review["text"] == "Any news?"
    assert review["author"]["_id"] == alice["_id"]
    assert review["author"]["role"] == "user"
    assert "hashed_password" not in review["author"]


def test_reviews_come_back_in_creation_order(client, signup, make_ticket):
    _, headers = signup("alice")
    ticket = make_ticket(headers)
    _add(client, ticket, "R1", headers)
    _add(client, ticket, "R2", headers)

    detail = client.get(f"/tickets/my-tickets/{ticket['_id']}", headers=headers).json()
    assert [r["text"] for r in detail["reviews"]] == ["R1", "R2"]
    assert detail["reviews"][0]["author"]["username"] == "alice"


def test_reviews_sorted_regardless_of_storage_order(client, signup, make_ticket, db, run):
    alice, headers = signup("alice")
    ticket = make_ticket(headers)
    base = datetime(2024, 5, 1, 12, 0, 0)
    stored = [
        {"_id": ObjectId(), "author_id": alice["_id"], "text": "late", "created_at": base + timedelta(hours=2)},
        {"_id": ObjectId(), "author_id": alice["_id"], "text": "early", "created_at": base},
        {"_id": ObjectId(), "author_id": alice["_id"], "text": "middle", "created_at": base + timedelta(hours=1)},
    ]
    run(db["tickets"].update_one({"_id": ObjectId(ticket["_id"])}, {"$set": {"reviews": stored}}))

    detail = client.get(f"/tickets/my-tickets/{ticket['_id']}", headers=headers).json()
    assert [r["text"] for r in detail["reviews"]] == ["early", "middle", "late"]

    updated = client.put(f"/tickets/{ticket['_id']}", json={"status": "In progress"}, headers=headers).json()
    assert [r["text"] for r in updated["reviews"]] == ["early", "middle", "late"]


def test_admin_can_review_any_ticket(client, signup, make_ticket):
    _, alice = signup("alice")
    _, admin = signup("root", role="admin")
    ticket = make_ticket(alice)
    assert _add(client, ticket, "Looking into it", admin).status_code == 201


def test_stranger_cannot_review(client, signup, make_ticket):
    _, alice = signup("alice")
    _, bob = signup("bob")
    ticket = make_ticket(alice)
    assert _add(client, ticket, "hi", bob).status_code == 403


def test_review_on_missing_ticket(client, signup):
    _, headers = signup("alice")
    res = client.post(f"/tickets/{ObjectId()}/reviews", json={"text": "hi"}, headers=headers)
    assert res.status_code == 404


def test_update_review_text(client, signup, make_ticket):
    _, headers = signup("alice")
    ticket = make_ticket(headers)
    review = _add(client, ticket, "typo", headers).json()

    res = client.put(f"/tickets/{ticket['_id']}/reviews/{review['_id']}", json={"text": "fixed"}, headers=headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Review has been successfully updated."}

    detail = client.get(f"/tickets/my-tickets/{ticket['_id']}", headers=headers).json()
    assert [r["text"] for r in detail["reviews"]] == ["fixed"]


def test_remove_review(client, signup, make_ticket):
    _, headers = signup("alice")
    ticket = make_ticket(headers)
    first = _add(client, ticket, "R1", headers).json()
    _add(client, ticket, "R2", headers)

    res = client.delete(f"/tickets/{ticket['_id']}/reviews/{first['_id']}", headers=headers)
    assert res.status_code == 200
    assert res.json() == {"message": "Review has been successfully removed."}

    detail = client.get(f"/tickets/my-tickets/{ticket['_id']}", headers=headers).json()
    assert [r["text"] for r in detail["reviews"]] == ["R2"]

    again = client.delete(f"/tickets/{ticket['_id']}/reviews/{first['_id']}", headers=headers)
    assert again.status_code == 404


def test_only_author_or_admin_edits_review(client, signup, make_ticket):
    _, alice = signup("alice")
    _, admin = signup("root", role="admin")
    ticket = make_ticket(alice)
    review = _add(client, ticket, "from support", admin).json()
    path = f"/tickets/{ticket['_id']}/reviews/{review['_id']}"

    # ticket owner is not the review author
    assert client.put(path, json={"text": "edited"}, headers=alice).status_code == 403
    assert client.delete(path, headers=alice).status_code == 403
    assert client.put(path, json={"text": "edited"}, headers=admin).status_code == 200


def test_review_mutations_bump_revision(client, signup, make_ticket):
    _, headers = signup("alice")
    ticket = make_ticket(headers)
    _add(client, ticket, "R1", headers)
    _add(client, ticket, "R2", headers)

    detail = client.get(f"/tickets/my-tickets/{ticket['_id']}", headers=headers).json()
    assert detail["revision"] == 2
    assert len(detail["reviews"]) == 2


def test_missing_review_is_404(client, signup, make_ticket):
    _, headers = signup("alice")
    ticket = make_ticket(headers)
    path = f"/tickets/{ticket['_id']}/reviews/{ObjectId()}"
    assert client.put(path, json={"text": "x"}, headers=headers).status_code == 404
    assert client.delete(f"/tickets/{ticket['_id']}/reviews/bogus", headers=headers).status_code == 404


def test_concurrent_reviews_are_both_kept(client, signup, make_ticket, db, run):
    import asyncio

    from airdesk.schemas.ticket import ReviewCreate
    from airdesk.schemas.user import Identity
    from airdesk.services import tickets as ticket_service

    alice, headers = signup("alice")
    ticket = make_ticket(headers)
    identity = Identity(id=alice["_id"], username="alice", email=alice["email"], role="user")

    async def add_both():
        return await asyncio.gather(
            ticket_service.add_review(db, identity, ticket["_id"], ReviewCreate(text="R1")),
            ticket_service.add_review(db, identity, ticket["_id"], ReviewCreate(text="R2")),
        )

    run(add_both())

    stored = run(db["tickets"].find_one({"_id": ObjectId(ticket["_id"])}))
    assert sorted(r["text"] for r in stored["reviews"]) == ["R1", "R2"]
    assert stored["revision"] == 2

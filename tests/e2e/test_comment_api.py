"""End-to-end tests for the comment endpoints."""

import pytest
from fastapi.testclient import TestClient

from threadline.interface.api.app import create_app
from tests.di import build_test_container


@pytest.fixture
def client():
    """Create test client over in-memory persistence."""
    app_instance = create_app(build_test_container())
    with TestClient(app_instance) as test_client:
        yield test_client


def post_comment(client, post_id=1, message="hello", author_id=7):
    return client.post(
        f"/posts/{post_id}/comments",
        json={"author_id": author_id, "message": message},
    )


def post_reply(client, comment_id, post_id=1, message="reply", author_id=7):
    return client.post(
        f"/posts/{post_id}/comments/{comment_id}/replies",
        json={"author_id": author_id, "message": message},
    )


class TestCreateComments:
    """POST /posts/{post_id}/comments and .../replies."""

    def test_create_root_comment(self, client):
        response = post_comment(client)

        assert response.status_code == 201
        data = response.json()
        assert data["path"] == "0001"
        assert data["depth"] == 1
        assert data["post_id"] == 1
        assert data["author_id"] == 7

    def test_create_reply(self, client):
        root = post_comment(client).json()

        response = post_reply(client, root["comment_id"])

        assert response.status_code == 201
        assert response.json()["path"] == "00010001"
        assert response.json()["depth"] == 2

    def test_blank_message_is_bad_request(self, client):
        response = post_comment(client, message="   ")

        assert response.status_code == 400

    def test_invalid_author_is_rejected(self, client):
        response = post_comment(client, author_id=0)

        assert response.status_code == 422

    def test_reply_to_missing_comment(self, client):
        response = post_reply(client, 999)

        assert response.status_code == 404


class TestReadComments:
    """GET endpoints."""

    def test_list_comments_in_tree_order(self, client):
        first = post_comment(client, message="first").json()
        post_comment(client, message="second")
        post_reply(client, first["comment_id"], message="first.1")

        response = client.get("/posts/1/comments")

        assert response.status_code == 200
        data = response.json()
        assert [c["message"] for c in data["comments"]] == [
            "first",
            "first.1",
            "second",
        ]
        assert data["total"] == 3

    def test_get_comment_with_replies(self, client):
        root = post_comment(client).json()
        child = post_reply(client, root["comment_id"]).json()
        post_reply(client, child["comment_id"])

        response = client.get(
            f"/posts/1/comments/{root['comment_id']}",
            params={"include_replies": True},
        )

        assert response.status_code == 200
        paths = [c["path"] for c in response.json()["comments"]]
        assert paths == ["0001", "00010001", "000100010001"]

    def test_get_comment_without_replies(self, client):
        root = post_comment(client).json()
        post_reply(client, root["comment_id"])

        response = client.get(f"/posts/1/comments/{root['comment_id']}")

        assert len(response.json()["comments"]) == 1

    def test_get_missing_comment(self, client):
        response = client.get("/posts/1/comments/12345")

        assert response.status_code == 404


class TestDeleteComment:
    """DELETE /posts/{post_id}/comments/{comment_id}."""

    def test_soft_delete(self, client):
        root = post_comment(client).json()
        post_reply(client, root["comment_id"])

        response = client.delete(f"/posts/1/comments/{root['comment_id']}")

        assert response.status_code == 200
        assert response.json()["is_deleted"] is True
        assert response.json()["path"] == "0001"

        listed = client.get("/posts/1/comments").json()
        assert [c["path"] for c in listed["comments"]] == ["00010001"]
        assert listed["total"] == 1

        with_deleted = client.get(
            "/posts/1/comments", params={"include_deleted": True}
        ).json()
        assert len(with_deleted["comments"]) == 2

    def test_delete_missing_comment(self, client):
        response = client.delete("/posts/1/comments/5")

        assert response.status_code == 404


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["segment_width"] == 4
    assert data["alphabet_size"] == 36

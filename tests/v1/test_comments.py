# tests/v1/test_comments.py
"""Tests for comment threads, edits, deletion and comment likes."""

from datetime import datetime

from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy import select

from inkwell.models import Comment, Like, User


class TestCreateComment:
    def test_top_level(self, client: TestClient, reader: User, reader_headers, author: User, make_post) -> None:
        post = make_post(author)
        response = client.post(
            "/api/posts/comments",
            json={"content": "First!", "postId": post.post_id},
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Comment added successfully"
        assert body["data"]["content"] == "First!"
        assert body["data"]["parent_comment_id"] is None
        assert body["data"]["username"] == "alice"
        assert body["data"]["is_edited"] is False

    def test_reply(self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment) -> None:
        post = make_post(author)
        parent = make_comment(author, post)
        response = client.post(
            "/api/posts/comments",
            json={"content": "Agreed", "postId": post.post_id, "parentCommentId": parent.comment_id},
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["parent_comment_id"] == parent.comment_id

    def test_requires_content(self, client: TestClient, reader_headers, author: User, make_post) -> None:
        post = make_post(author)
        response = client.post(
            "/api/posts/comments", json={"content": "   ", "postId": post.post_id}, headers=reader_headers
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Content and post ID are required"

    def test_unknown_post(self, client: TestClient, reader_headers) -> None:
        response = client.post(
            "/api/posts/comments", json={"content": "Hi", "postId": 99999}, headers=reader_headers
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Post not found"

    def test_unknown_parent(self, client: TestClient, reader_headers, author: User, make_post) -> None:
        post = make_post(author)
        response = client.post(
            "/api/posts/comments",
            json={"content": "Hi", "postId": post.post_id, "parentCommentId": 99999},
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Parent comment not found"

    def test_parent_on_other_post(
        self, client: TestClient, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        other = make_post(author)
        parent = make_comment(author, other)
        response = client.post(
            "/api/posts/comments",
            json={"content": "Hi", "postId": post.post_id, "parentCommentId": parent.comment_id},
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Parent comment belongs to a different post"

    def test_requires_token(self, client: TestClient, author: User, make_post) -> None:
        post = make_post(author)
        response = client.post("/api/posts/comments", json={"content": "Hi", "postId": post.post_id})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestReadComments:
    def test_tree(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment, make_like
    ) -> None:
        post = make_post(author)
        older = make_comment(reader, post, content="older")
        newer = make_comment(author, post, content="newer")
        reply = make_comment(author, post, parent=older, content="reply")
        nested = make_comment(reader, post, parent=reply, content="nested")
        make_like(author, "comment", older.comment_id)

        response = client.get(f"/api/posts/{post.post_id}/comments", headers=reader_headers)
        assert response.status_code == status.HTTP_200_OK
        tree = response.json()["data"]
        assert [node["content"] for node in tree] == ["newer", "older"]
        assert tree[0]["replies"] == []

        older_node = tree[1]
        assert older_node["like_count"] == 1
        assert older_node["reply_count"] == 1
        assert [child["comment_id"] for child in older_node["replies"]] == [reply.comment_id]
        grandchildren = older_node["replies"][0]["replies"]
        assert [child["comment_id"] for child in grandchildren] == [nested.comment_id]
        assert newer.comment_id == tree[0]["comment_id"]

    def test_top_level_pagination(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        for n in range(3):
            make_comment(reader, post, content=f"c{n}")
        response = client.get(
            f"/api/posts/{post.post_id}/comments",
            params={"page": 2, "limit": 2},
            headers=reader_headers,
        )
        assert [node["content"] for node in response.json()["data"]] == ["c0"]

    def test_comments_of_missing_post(self, client: TestClient, reader_headers) -> None:
        response = client.get("/api/posts/99999/comments", headers=reader_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_direct_replies(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        parent = make_comment(author, post)
        first = make_comment(reader, post, parent=parent, content="one")
        make_comment(reader, post, parent=first, content="deeper")
        make_comment(reader, post, parent=parent, content="two")

        response = client.get(f"/api/posts/comments/{parent.comment_id}/replies", headers=reader_headers)
        assert [reply["content"] for reply in response.json()["data"]] == ["one", "two"]

        paged = client.get(
            f"/api/posts/comments/{parent.comment_id}/replies",
            params={"page": 2, "limit": 1},
            headers=reader_headers,
        )
        assert [reply["content"] for reply in paged.json()["data"]] == ["two"]

    def test_user_comments(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author, title="Commented")
        make_comment(reader, post, content="mine")
        make_comment(author, post, content="not mine")

        response = client.get(f"/api/posts/user/{reader.user_id}/comments", headers=reader_headers)
        data = response.json()["data"]
        assert [comment["content"] for comment in data] == ["mine"]
        assert data[0]["post_title"] == "Commented"
        assert data[0]["post_slug"] == post.slug


class TestModifyComments:
    def test_edit_marks_comment(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        response = client.put(
            f"/api/posts/comments/{comment.comment_id}",
            json={"content": "Edited text"},
            headers=reader_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Comment updated successfully"
        data = response.json()["data"]
        assert data["content"] == "Edited text"
        assert data["is_edited"] is True
        assert data["edited_at"] is not None

    def test_second_edit_stays_edited(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        url = f"/api/posts/comments/{comment.comment_id}"

        first = client.put(url, json={"content": "Edit one"}, headers=reader_headers).json()["data"]
        second = client.put(url, json={"content": "Edit two"}, headers=reader_headers).json()["data"]

        assert first["is_edited"] is True
        assert second["is_edited"] is True
        assert second["content"] == "Edit two"
        assert datetime.fromisoformat(second["edited_at"]) >= datetime.fromisoformat(first["edited_at"])

    def test_only_author_edits(
        self, client: TestClient, admin_headers, reader: User, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        response = client.put(
            f"/api/posts/comments/{comment.comment_id}",
            json={"content": "Hijacked"},
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Not authorized to update this comment"

    def test_edit_requires_content(
        self, client: TestClient, reader: User, reader_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        response = client.put(
            f"/api/posts/comments/{comment.comment_id}", json={"content": ""}, headers=reader_headers
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Content is required"

    def test_delete_removes_subtree(
        self,
        client: TestClient,
        reader: User,
        reader_headers,
        author: User,
        make_post,
        make_comment,
        make_like,
        db_session,
    ) -> None:
        post = make_post(author)
        root = make_comment(reader, post)
        child = make_comment(author, post, parent=root)
        make_comment(reader, post, parent=child)
        sibling = make_comment(author, post)
        make_like(author, "comment", child.comment_id)
        make_like(reader, "comment", sibling.comment_id)
        root_id, sibling_id = root.comment_id, sibling.comment_id

        response = client.delete(f"/api/posts/comments/{root_id}", headers=reader_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Comment deleted successfully"

        db_session.expire_all()
        assert db_session.scalars(select(Comment.comment_id)).all() == [sibling_id]
        assert [like.target_id for like in db_session.scalars(select(Like))] == [sibling_id]

    def test_admin_deletes_any(
        self, client: TestClient, admin_headers, reader: User, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        response = client.delete(f"/api/posts/comments/{comment.comment_id}", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

    def test_stranger_cannot_delete(
        self, client: TestClient, reader: User, author_headers, author: User, make_post, make_comment
    ) -> None:
        post = make_post(author)
        comment = make_comment(reader, post)
        response = client.delete(f"/api/posts/comments/{comment.comment_id}", headers=author_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Not authorized to delete this comment"

    def test_delete_missing(self, client: TestClient, reader_headers) -> None:
        response = client.delete("/api/posts/comments/99999", headers=reader_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "Comment not found"


class TestCommentLikes:
    def test_toggle(self, client: TestClient, reader_headers, author: User, make_post, make_comment) -> None:
        post = make_post(author)
        comment = make_comment(author, post)
        url = f"/api/posts/comments/{comment.comment_id}/like"

        liked = client.post(url, headers=reader_headers)
        assert liked.json()["message"] == "Comment liked"
        assert liked.json()["data"] == {"liked": True, "likeCount": 1}

        unliked = client.post(url, headers=reader_headers)
        assert unliked.json()["message"] == "Comment unliked"
        assert unliked.json()["data"] == {"liked": False, "likeCount": 0}

    def test_missing_comment(self, client: TestClient, reader_headers) -> None:
        response = client.post("/api/posts/comments/99999/like", headers=reader_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_dislike_after_like_removes(
        self, client: TestClient, reader_headers, author: User, make_post, make_comment, db_session
    ) -> None:
        post = make_post(author)
        comment = make_comment(author, post)
        url = f"/api/posts/comments/{comment.comment_id}/like"
        client.post(url, json={"likeType": "like"}, headers=reader_headers)

        response = client.post(url, json={"likeType": "dislike"}, headers=reader_headers)
        assert response.json()["message"] == "Comment unliked"
        assert response.json()["data"] == {"liked": False, "likeCount": 0}
        assert db_session.scalars(select(Like)).all() == []

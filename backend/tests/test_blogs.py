"""Tests for the public and admin blog endpoints."""

POST = {
    "title": "Hello World",
    "content": "<p>Java 'records' are neat</p>",
    "author": "Ann",
    "published": True,
}


def create(client, headers, **overrides):
    return client.post("/api/blogs/admin", json={**POST, **overrides}, headers=headers)


class TestAdminBlogs:
    """Tests for the /api/blogs/admin routes."""

    def test_create_returns_id(self, client, csrf_headers):
        response = create(client, csrf_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["id"], int)

    def test_admin_list_includes_drafts(self, client, csrf_headers):
        create(client, csrf_headers)
        create(client, csrf_headers, title="Draft", published=False)

        blogs = client.get("/api/blogs/admin/all").json()["blogs"]
        assert {b["title"] for b in blogs} == {"Hello World", "Draft"}

    def test_update_replaces_fields(self, client, csrf_headers):
        blog_id = create(client, csrf_headers, published=False).json()["id"]

        response = client.put(
            f"/api/blogs/admin/{blog_id}",
            json={**POST, "title": "Hello Again"},
            headers=csrf_headers,
        )
        assert response.status_code == 200

        detail = client.get("/api/blogs/hello-again").json()["blog"]
        assert detail["title"] == "Hello Again"
        assert detail["published"] is True

    def test_update_missing_blog_is_404(self, client, csrf_headers):
        response = client.put("/api/blogs/admin/999", json=POST, headers=csrf_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Blog not found"}

    def test_delete(self, client, csrf_headers):
        blog_id = create(client, csrf_headers).json()["id"]

        response = client.delete(f"/api/blogs/admin/{blog_id}", headers=csrf_headers)
        assert response.status_code == 200
        assert client.get("/api/blogs").json() == {"blogs": []}

    def test_mutations_require_csrf(self, client):
        assert client.post("/api/blogs/admin", json=POST).status_code == 403
        assert client.put("/api/blogs/admin/1", json=POST).status_code == 403
        assert client.delete("/api/blogs/admin/1").status_code == 403

    def test_create_rate_limit(self, client, csrf_headers):
        for i in range(5):
            assert create(client, csrf_headers, title=f"Post {i}").status_code == 200
        response = create(client, csrf_headers, title="Post 5")
        assert response.status_code == 429


class TestPublicBlogs:
    """Tests for GET /api/blogs and GET /api/blogs/{slug}."""

    def test_lists_published_summaries(self, client, csrf_headers):
        create(client, csrf_headers)
        create(client, csrf_headers, title="Secret Draft", published=False)

        blogs = client.get("/api/blogs").json()["blogs"]
        assert len(blogs) == 1
        assert blogs[0]["slug"] == "hello-world"
        assert "content" not in blogs[0]

    def test_detail_is_html_escaped(self, client, csrf_headers):
        create(client, csrf_headers)

        response = client.get("/api/blogs/hello-world")
        assert response.status_code == 200
        content = response.json()["blog"]["content"]
        assert content == "&lt;p&gt;Java &#x27;records&#x27; are neat&lt;&#x2F;p&gt;"

    def test_draft_is_not_found(self, client, csrf_headers):
        create(client, csrf_headers, title="Secret Draft", published=False)

        response = client.get("/api/blogs/secret-draft")
        assert response.status_code == 404
        assert response.json() == {"error": "Blog not found"}

    def test_unknown_slug_is_404(self, client):
        assert client.get("/api/blogs/nope").status_code == 404

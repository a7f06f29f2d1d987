from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

User = get_user_model()


class AuthApiTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="owner", email="owner@example.com", password="Grocer#2024")

    def _authenticate(self, user):
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_login_returns_tokens_and_updates_last_login(self):
        resp = self.client.post(
            "/api/auth/login/", {"username": "owner", "password": "Grocer#2024"}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)
        self.assertEqual(resp.data["user"]["username"], "owner")
        self.user.refresh_from_db()
        self.assertIsNotNone(self.user.last_login)

    def test_login_wrong_password_uses_error_envelope(self):
        resp = self.client.post("/api/auth/login/", {"username": "owner", "password": "nope"}, format="json")
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(resp.data["success"])
        self.assertEqual(resp.data["error"]["status"], "fail")

    def test_inactive_user_cannot_login(self):
        self.user.is_active = False
        self.user.save()
        resp = self.client.post(
            "/api/auth/login/", {"username": "owner", "password": "Grocer#2024"}, format="json"
        )
        self.assertEqual(resp.status_code, 401)

    def test_profile_requires_auth(self):
        resp = self.client.get("/api/auth/profile/")
        self.assertEqual(resp.status_code, 401)

    def test_profile_update(self):
        self._authenticate(self.user)
        resp = self.client.put(
            "/api/auth/profile/", {"username": "owner", "email": "shop@example.com"}, format="json"
        )
        self.assertEqual(resp.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "shop@example.com")

    def test_change_password(self):
        self._authenticate(self.user)
        resp = self.client.post(
            "/api/auth/change-password/",
            {"current_password": "Grocer#2024", "new_password": "Fresh#Mango9"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password("Fresh#Mango9"))

    def test_change_password_rejects_wrong_current(self):
        self._authenticate(self.user)
        resp = self.client.post(
            "/api/auth/change-password/",
            {"current_password": "wrong", "new_password": "Fresh#Mango9"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("Current password is incorrect", resp.data["error"]["message"])


class UserAdminApiTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(username="admin", email="admin@example.com", password="Grocer#2024")
        token = RefreshToken.for_user(self.admin)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_create_user_hashes_password(self):
        resp = self.client.post(
            "/api/users/",
            {"username": "cashier", "email": "cashier@example.com", "password": "Till#Open55"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertNotIn("password", resp.data)
        user = User.objects.get(username="cashier")
        self.assertTrue(user.check_password("Till#Open55"))
        self.assertTrue(user.password.startswith("bcrypt_sha256$"))

    def test_create_user_requires_password(self):
        resp = self.client.post("/api/users/", {"username": "x", "email": "x@example.com"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_toggle_status(self):
        other = User.objects.create_user(username="other", email="other@example.com", password="Grocer#2024")
        resp = self.client.patch(f"/api/users/{other.id}/toggle-status/")
        self.assertEqual(resp.status_code, 200)
        other.refresh_from_db()
        self.assertFalse(other.is_active)

    def test_cannot_toggle_self(self):
        resp = self.client.patch(f"/api/users/{self.admin.id}/toggle-status/")
        self.assertEqual(resp.status_code, 400)

    def test_inactive_user_is_not_admin(self):
        other = User.objects.create_user(
            username="other", email="other@example.com", password="Grocer#2024", is_active=False
        )
        self.assertFalse(other.is_shop_admin)

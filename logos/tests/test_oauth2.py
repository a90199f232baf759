import unittest
from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from logos.app import create_app
from logos.config import Settings
from logos.oauth2 import GoogleOAuthClient, UserProfile, _safe_return

ALICE = UserProfile(id="alice-1", display_name="Alice", image_url=None)


class OAuthRoutesTests(unittest.TestCase):
    def setUp(self):
        settings = Settings(
            data_backend="memory",
            oauth2_client_id="client-id",
            oauth2_client_secret="client-secret",
            oauth2_callback="http://testserver/auth/google/callback",
        )
        self.app = create_app(settings)
        self.client = TestClient(self.app)

    def _login(self, return_to="/logos/mine"):
        response = self.client.get(
            "/auth/login", params={"return": return_to}, follow_redirects=False
        )
        self.assertEqual(response.status_code, 302)
        location = urlparse(response.headers["location"])
        self.assertEqual(location.netloc, "accounts.google.com")
        query = parse_qs(location.query)
        self.assertEqual(query["client_id"], ["client-id"])
        self.assertEqual(query["response_type"], ["code"])
        return query["state"][0]

    @patch.object(GoogleOAuthClient, "fetch_profile", new_callable=AsyncMock)
    @patch.object(GoogleOAuthClient, "exchange_code", new_callable=AsyncMock)
    def test_login_flow_signs_user_in(self, exchange_code, fetch_profile):
        exchange_code.return_value = "access-token"
        fetch_profile.return_value = ALICE

        state = self._login()
        response = self.client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "/logos/mine")
        exchange_code.assert_awaited_once_with("auth-code")
        fetch_profile.assert_awaited_once_with("access-token")

        response = self.client.get("/logos/mine")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Alice", response.text)

        response = self.client.post(
            "/logos/add", data={"title": "signed"}, follow_redirects=False
        )
        logo_id = response.headers["location"].replace("/logos/", "")
        self.assertEqual(self.app.state.logo_store.read(logo_id).created_by_id, "alice-1")

        response = self.client.get(
            "/auth/logout", params={"return": "/logos"}, follow_redirects=False
        )
        self.assertEqual(response.headers["location"], "/logos")
        response = self.client.get("/logos/mine", follow_redirects=False)
        self.assertEqual(response.status_code, 302)

    def test_callback_with_wrong_state_is_rejected(self):
        self._login()
        response = self.client.get(
            "/auth/google/callback",
            params={"code": "auth-code", "state": "forged"},
            follow_redirects=False,
        )
        self.assertEqual(response.status_code, 400)

    def test_login_without_configuration(self):
        client = TestClient(create_app(Settings(data_backend="memory")))
        response = client.get("/auth/login", follow_redirects=False)
        self.assertEqual(response.status_code, 500)
        self.assertIn("Sign-in is not configured", response.text)

    def test_pages_offer_login_link(self):
        response = self.client.get("/logos")
        self.assertIn('href="/auth/login?return=%2Flogos"', response.text)


class OAuthHelpersTests(unittest.TestCase):
    def test_safe_return(self):
        self.assertEqual(_safe_return("/logos/mine"), "/logos/mine")
        self.assertEqual(_safe_return("https://evil.example"), "/")
        self.assertEqual(_safe_return("//evil.example"), "/")
        self.assertEqual(_safe_return(None), "/")

    def test_profile_from_userinfo(self):
        profile = UserProfile.from_userinfo(
            {"sub": "123", "name": "Alice", "picture": "https://example.test/a.png"}
        )
        self.assertEqual(profile, UserProfile("123", "Alice", "https://example.test/a.png"))
        self.assertEqual(
            UserProfile.from_userinfo({"sub": "9", "email": "b@example.test"}).display_name,
            "b@example.test",
        )

    def test_authorization_url(self):
        client = GoogleOAuthClient("id", "secret", "http://localhost/cb")
        url = urlparse(client.build_authorization_url("xyz"))
        query = parse_qs(url.query)
        self.assertEqual(query["state"], ["xyz"])
        self.assertEqual(query["scope"], ["openid email profile"])
        self.assertEqual(query["redirect_uri"], ["http://localhost/cb"])


if __name__ == "__main__":
    unittest.main()

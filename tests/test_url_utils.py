"""Tests for the landing-page heuristic."""

from formpilot.url_utils import is_landing_page, is_landing_url


class TestIsLandingUrl:
    def test_landing_token(self):
        assert is_landing_url("https://a.com/home")
        assert is_landing_url("https://a.com/login/dashboard")

    def test_flow_token(self):
        assert not is_landing_url("https://a.com/s/login/")
        assert not is_landing_url("https://a.com/agreement")
        assert not is_landing_url("https://a.com/flow/step2")

    def test_neutral_url_is_landing(self):
        assert is_landing_url("https://portal.example.com/s/")

    def test_empty(self):
        assert not is_landing_url("")

    def test_custom_tokens(self):
        assert not is_landing_url("https://a.com/onboarding", flow_tokens=("onboarding",))
        assert is_landing_url("https://a.com/welcome", landing_tokens=("welcome",), flow_tokens=("welcome",))


class TestIsLandingPage:
    def test_text_indicator(self):
        assert is_landing_page(
            "https://a.com/login", "Welcome back, Sam", text_indicators=("welcome back",)
        )

    def test_no_indicator(self):
        assert not is_landing_page("https://a.com/login", "Sign in to continue")

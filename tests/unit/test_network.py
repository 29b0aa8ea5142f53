"""Tests for cv_gateway.network — client IP and user agent extraction."""

from unittest.mock import MagicMock

from starlette.datastructures import Headers

from src.cv_gateway.network import UNKNOWN, NetworkContext, client_ip, extract_network_context


class TestClientIp:
    def test_first_forwarded_hop_wins(self) -> None:
        headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1", "x-real-ip": "10.0.0.2"}
        assert client_ip(headers) == "203.0.113.7"

    def test_falls_back_to_real_ip(self) -> None:
        assert client_ip({"x-real-ip": " 198.51.100.4 "}) == "198.51.100.4"

    def test_blank_forwarded_for_falls_through(self) -> None:
        assert client_ip({"x-forwarded-for": " , 10.0.0.1", "x-real-ip": "10.0.0.9"}) == "10.0.0.9"

    def test_unknown_when_no_headers(self) -> None:
        assert client_ip({}) == UNKNOWN

    def test_starlette_headers_are_case_insensitive(self) -> None:
        headers = Headers(headers={"X-Forwarded-For": "192.0.2.1"})
        assert client_ip(headers) == "192.0.2.1"


class TestExtractNetworkContext:
    def test_reads_ip_and_user_agent(self) -> None:
        request = MagicMock()
        request.headers = Headers(
            raw=[(b"x-real-ip", b"192.0.2.8"), (b"user-agent", b"Mozilla/5.0")]
        )
        assert extract_network_context(request) == NetworkContext("192.0.2.8", "Mozilla/5.0")

    def test_missing_user_agent_is_unknown(self) -> None:
        request = MagicMock()
        request.headers = Headers(raw=[])
        ctx = extract_network_context(request)
        assert ctx.ip_address == UNKNOWN
        assert ctx.user_agent == UNKNOWN

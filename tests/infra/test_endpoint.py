"""Tests for endpoint string parsing."""

import pytest

from oss_storage.infra import endpoint
from oss_storage.infra.endpoint import Endpoint, EndpointError


class TestParse:
    def test_https_default_port(self):
        ep = endpoint.parse("https:oss-cn-hangzhou.aliyuncs.com")

        assert ep == Endpoint(
            protocol="https", host="oss-cn-hangzhou.aliyuncs.com", port=443
        )
        assert str(ep) == "https://oss-cn-hangzhou.aliyuncs.com"

    def test_http_custom_port(self):
        ep = endpoint.parse("http:127.0.0.1:9000")

        assert ep.port == 9000
        assert str(ep) == "http://127.0.0.1:9000"

    def test_explicit_default_port_is_omitted(self):
        assert str(endpoint.parse("http:localhost:80")) == "http://localhost"

    @pytest.mark.parametrize(
        "cfg",
        ["", "oss-cn-hangzhou.aliyuncs.com", "ftp:host", "tcp:host:22"],
    )
    def test_unsupported_protocol(self, cfg):
        with pytest.raises(EndpointError, match="unsupported protocol"):
            endpoint.parse(cfg)

    @pytest.mark.parametrize(
        "cfg",
        ["https:", "https://host", "http:host:port", "http:host:0", "http:host:70000"],
    )
    def test_malformed(self, cfg):
        with pytest.raises(EndpointError):
            endpoint.parse(cfg)

    def test_too_many_parts(self):
        with pytest.raises(EndpointError, match="invalid value"):
            endpoint.parse("http:host:80:extra")

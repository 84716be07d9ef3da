import pytest
from unittest.mock import MagicMock, patch
import httpx

from granacred.gateway.client import WebhookGateway
from granacred.errors import GatewayError
from granacred.store.models import RemoteStatus


@pytest.fixture(autouse=True)
def no_metrics():
    with patch("granacred.gateway.client.metrics") as m:
        yield m


@pytest.fixture
def gateway():
    return WebhookGateway(url="http://example.com/webhook", timeout_sec=2.0)


def _response(status_code=200, json_body=None, json_exc=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if json_exc is not None:
        resp.json.side_effect = json_exc
    else:
        resp.json.return_value = json_body
    return resp


@patch("httpx.Client.post")
def test_send_posts_action_with_payload(mock_post, gateway, no_metrics):
    mock_post.return_value = _response(json_body={"status": "eligible", "message": "ok", "amount": 1500.5})

    result = gateway.send("check", {"cpf": "52998224725"})

    assert result.status == RemoteStatus.ELIGIBLE
    assert result.amount == 1500.5
    mock_post.assert_called_once_with(
        "http://example.com/webhook",
        json={"action": "check", "cpf": "52998224725"},
    )
    no_metrics.increment_attempt.assert_called_once_with("check")
    no_metrics.increment_ok.assert_called_once_with("check")
    no_metrics.increment_outcome.assert_called_once_with("eligible")


@patch("httpx.Client.post")
def test_non_2xx_raises_gateway_error(mock_post, gateway, no_metrics):
    mock_post.return_value = _response(status_code=503, text="Service Unavailable")

    with pytest.raises(GatewayError) as exc:
        gateway.send("status", {"cpf": "52998224725"})

    assert exc.value.status_code == 503
    assert exc.value.action == "status"
    no_metrics.increment_failed.assert_called_once_with("status")


@patch("httpx.Client.post")
def test_transport_error_raises_gateway_error(mock_post, gateway):
    mock_post.side_effect = httpx.ReadTimeout("Timeout")

    with pytest.raises(GatewayError) as exc:
        gateway.send("check", {"cpf": "52998224725"})

    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, httpx.ReadTimeout)


@patch("httpx.Client.post")
def test_invalid_json_raises_gateway_error(mock_post, gateway):
    mock_post.return_value = _response(json_exc=ValueError("Expecting value"))

    with pytest.raises(GatewayError):
        gateway.send("check", {"cpf": "52998224725"})


@patch("httpx.Client.post")
def test_non_object_json_raises_gateway_error(mock_post, gateway):
    mock_post.return_value = _response(json_body=["eligible"])

    with pytest.raises(GatewayError):
        gateway.send("check", {"cpf": "52998224725"})


@patch("httpx.Client.post")
def test_withdraw_without_status_defaults_to_eligible(mock_post, gateway):
    mock_post.return_value = _response(json_body={"formalization_url": "https://x/y"})

    result = gateway.send("withdraw", {"cpf": "52998224725"})

    assert result.status == RemoteStatus.ELIGIBLE
    assert result.formalization_url == "https://x/y"


@patch("httpx.Client.post")
def test_check_without_status_is_unknown(mock_post, gateway):
    mock_post.return_value = _response(json_body={"message": "?"})

    result = gateway.send("check", {"cpf": "52998224725"})

    assert result.status == RemoteStatus.UNKNOWN


def test_unknown_action_rejected(gateway):
    with pytest.raises(ValueError):
        gateway.send("delete", {})


def test_missing_url_raises_gateway_error():
    gw = WebhookGateway(url="http://placeholder")
    gw.url = ""
    with pytest.raises(GatewayError):
        gw.send("check", {"cpf": "52998224725"})


@patch("httpx.Client.post")
@patch("granacred.gateway.client.log")
def test_non_httpx_error_raises_gateway_error(mock_log, mock_post, gateway, no_metrics):
    mock_post.side_effect = httpx.InvalidURL("Invalid port")

    with pytest.raises(GatewayError) as exc:
        gateway.send("withdraw", {"cpf": "52998224725"})

    assert isinstance(exc.value.__cause__, httpx.InvalidURL)
    no_metrics.increment_failed.assert_called_once_with("withdraw")
    assert mock_log.call_args.kwargs["event"] == "gateway_send_exception"


def test_malformed_url_raises_gateway_error():
    gw = WebhookGateway(url="http://[::1")
    with pytest.raises(GatewayError):
        gw.send("check", {"cpf": "52998224725"})

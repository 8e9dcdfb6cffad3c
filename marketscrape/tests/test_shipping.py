"""Tests for city extraction, JNE lookups and fee table parsing."""

from unittest.mock import MagicMock, patch

import pytest
import requests  # type: ignore[import-untyped]

from marketscrape.config import JNE_ORIGIN_CODE, JNE_SEARCH_URL, JNE_SHIPPING_FEE_URL
from marketscrape.errors import FetchError, ResolutionError, ValidationError
from marketscrape.shipping import (
    _is_region_segment,
    calculate_shipping_fee,
    create_session,
    extract_city_from_address,
    fetch,
    get_destination_code,
    parse_shipping_fee_table,
    resolve_shipping_options,
)


def make_response(status_code=200, json_data=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = json_data
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Error")
        error.response = resp
        resp.raise_for_status.side_effect = error
    return resp


class TestExtractCity:
    @pytest.mark.parametrize(
        "address,expected",
        [
            ("Jl. Mawar I/207, Kota Yogyakarta, D.I. Yogyakarta 55281", "Yogyakarta"),
            ("Jl. Kaliurang, Kabupaten Sleman, DI Yogyakarta", "Sleman"),
            ("Jl. Magelang KM 5, Kab. Sleman", "Sleman"),
            ("Jl. X, Sleman, D.I. Yogyakarta", "Sleman"),
            ("Jl. Sudirman 1, Bandung, Jawa Barat, 40111", "Bandung"),
            ("Jl. Ahmad Yani, Balikpapan, Kalimantan Timur, Indonesia", "Balikpapan"),
            ("Jl. Thamrin, Jakarta Pusat, DKI Jakarta", "Jakarta Pusat"),
            ("Jl. Nyi Pembayun, Kotagede, Kota Yogyakarta", "Yogyakarta"),
            ("Jl. A, Kotamobagu, Sulawesi Utara", "Kotamobagu"),
            ("Jl. Pangeran Antasari, Kotabaru, Kalimantan Selatan", "Kotabaru"),
        ],
    )
    def test_city(self, address, expected):
        assert extract_city_from_address(address) == expected

    @pytest.mark.parametrize("address", [None, "", "Indonesia", "55281, Jawa Tengah"])
    def test_no_city(self, address):
        assert extract_city_from_address(address) is None

    def test_street_named_after_abbreviation_is_not_a_region(self):
        assert extract_city_from_address("Jl. D.I. Panjaitan No. 5, Jawa Tengah") == "Jl. D.I. Panjaitan No. 5"

    @pytest.mark.parametrize(
        "segment,is_region",
        [
            ("D.I. Yogyakarta 55281", True),
            ("DI Yogyakarta", True),
            ("DIY", True),
            ("DKI Jakarta", True),
            ("Jawa Barat", True),
            ("Jl. D.I. Panjaitan", False),
            ("Dieng", False),
            ("Sleman", False),
        ],
    )
    def test_region_segments(self, segment, is_region):
        assert _is_region_segment(segment) is is_region


class TestFetch:
    @patch("marketscrape.shipping.time.sleep")
    def test_retries_on_server_error(self, mock_sleep):
        session = MagicMock()
        ok = make_response(200, text="ok")
        session.get.side_effect = [make_response(503), ok]

        assert fetch(session, "https://jne.test/x") is ok
        assert session.get.call_count == 2
        mock_sleep.assert_called_once()

    @patch("marketscrape.shipping.time.sleep")
    def test_gives_up_after_retries(self, mock_sleep):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(FetchError, match="Failed to reach"):
            fetch(session, "https://jne.test/x", max_retries=2)
        assert session.get.call_count == 3

    def test_client_error_not_retried(self):
        session = MagicMock()
        session.get.return_value = make_response(404)

        with pytest.raises(FetchError, match="HTTP Error 404"):
            fetch(session, "https://jne.test/x")
        assert session.get.call_count == 1


def test_create_session_headers():
    session = create_session()
    assert "Mozilla" in session.headers["User-Agent"]
    assert session.headers["Accept-Language"].startswith("en-US")


class TestDestinationCode:
    def test_first_result(self):
        session = MagicMock()
        session.get.return_value = make_response(
            json_data={"status": True, "data": [{"code": "JOG10000", "label": "YOGYAKARTA"}, {"code": "X"}]}
        )

        assert get_destination_code("Yogyakarta", session) == "JOG10000"
        session.get.assert_called_once()
        args, kwargs = session.get.call_args
        assert args[0] == JNE_SEARCH_URL
        assert kwargs["params"] == {"search": "Yogyakarta"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"status": False, "data": []},
            {"status": True, "data": []},
            {"status": True},
            [],
        ],
    )
    def test_not_found(self, payload):
        session = MagicMock()
        session.get.return_value = make_response(json_data=payload)
        assert get_destination_code("Atlantis", session) is None

    def test_bad_json(self):
        session = MagicMock()
        resp = make_response()
        resp.json.side_effect = ValueError("Expecting value")
        session.get.return_value = resp
        assert get_destination_code("Yogyakarta", session) is None


def test_parse_fee_table(shipping_fee_html):
    options = [o.to_dict() for o in parse_shipping_fee_table(shipping_fee_html)]
    assert options == [
        {"service": "REG", "price": 18000, "etd": "2 - 3 Hari"},
        {"service": "YES", "price": 32000, "etd": "1 Hari"},
    ]


def test_parse_fee_table_without_table():
    assert parse_shipping_fee_table("<html><body>Maintenance</body></html>") == []


class TestCalculateShippingFee:
    def test_request_parameters(self, shipping_fee_html):
        session = MagicMock()
        session.get.return_value = make_response(text=shipping_fee_html)

        options = calculate_shipping_fee("BDO10000", "2", session)

        assert len(options) == 2
        args, kwargs = session.get.call_args
        assert args[0] == JNE_SHIPPING_FEE_URL
        assert kwargs["params"] == {"origin": JNE_ORIGIN_CODE, "destination": "BDO10000", "weight": "2"}

    @patch("marketscrape.shipping.time.sleep")
    def test_failure_raises_fetch_error(self, mock_sleep):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(FetchError) as exc_info:
            calculate_shipping_fee("BDO10000", "1", session)
        assert exc_info.value.status_code == 500
        assert exc_info.value.message.startswith("Failed to calculate shipping fee")


class TestResolveShippingOptions:
    ADDRESS = "Jl. Mawar I/207, Kota Yogyakarta, D.I. Yogyakarta 55281"

    @pytest.mark.parametrize(
        "address,weight",
        [(None, "1"), ("", "1"), (ADDRESS, None), (ADDRESS, "  ")],
    )
    def test_missing_input_makes_no_requests(self, address, weight):
        session = MagicMock()
        with pytest.raises(ValidationError, match="Missing address or weight parameter"):
            resolve_shipping_options(address, weight, session)
        session.get.assert_not_called()

    def test_non_numeric_weight(self):
        session = MagicMock()
        with pytest.raises(ValidationError) as exc_info:
            resolve_shipping_options(self.ADDRESS, "satu kilo", session)
        assert exc_info.value.status_code == 400
        session.get.assert_not_called()

    def test_no_city(self):
        session = MagicMock()
        with pytest.raises(ResolutionError) as exc_info:
            resolve_shipping_options("Indonesia", "1", session)
        assert exc_info.value.status_code == 400
        session.get.assert_not_called()

    def test_unknown_destination(self):
        session = MagicMock()
        session.get.return_value = make_response(json_data={"status": True, "data": []})

        with pytest.raises(ResolutionError) as exc_info:
            resolve_shipping_options(self.ADDRESS, "1", session)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Destination not found for the city: Yogyakarta"

    def test_success(self, shipping_fee_html):
        session = MagicMock()
        session.get.side_effect = [
            make_response(json_data={"status": True, "data": [{"code": "JOG10000"}]}),
            make_response(text=shipping_fee_html),
        ]

        options = resolve_shipping_options(self.ADDRESS, "1.5", session)

        assert [o.service for o in options] == ["REG", "YES"]
        fee_params = session.get.call_args_list[1].kwargs["params"]
        assert fee_params["destination"] == "JOG10000"
        assert fee_params["weight"] == "1.5"

"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

import pytest

from marketscrape.cli import main, parse_args
from marketscrape.errors import ResolutionError
from marketscrape.models import ShippingOption


def test_product_requires_url_or_html():
    with pytest.raises(SystemExit):
        parse_args(["product"])


def test_product_from_snapshot(fixtures_dir, capsys):
    code = main(["--no-log-file", "product", "--html", str(fixtures_dir / "product_page.html")])

    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["product"]["title"] == "POCO X7 Pro 5G Dimensity 8400 Ultra"
    assert result["reviews"]["totalReviews"] == 567


@patch("marketscrape.cli.resolve_shipping_options")
def test_shipping(mock_resolve, capsys):
    mock_resolve.return_value = [ShippingOption(service="REG", price=18000, etd="2 - 3 Hari")]

    code = main(["--no-log-file", "shipping", "Jl. X, Kota Yogyakarta", "1"])

    assert code == 0
    mock_resolve.assert_called_once_with("Jl. X, Kota Yogyakarta", "1")
    assert json.loads(capsys.readouterr().out) == [{"service": "REG", "price": 18000, "etd": "2 - 3 Hari"}]


@patch("marketscrape.cli.resolve_shipping_options")
def test_scrape_error_exit_code(mock_resolve, capsys):
    mock_resolve.side_effect = ResolutionError("Destination not found for the city: Atlantis", 404)

    code = main(["--no-log-file", "shipping", "Jl. X, Atlantis", "1"])

    assert code == 1
    assert "Destination not found" in capsys.readouterr().err

"""Shared fixtures for the web test suite."""

import pytest

from marketscrape.tests.conftest import FakeBrowserStack, load_fixture
from marketscrape_web.app import create_app


@pytest.fixture
def client():
    """Create Flask test client."""
    app = create_app()
    app.config["TESTING"] = True

    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def product_stack():
    """Fake browser that serves the current product page fixture."""
    return FakeBrowserStack(
        html=load_fixture("product_page.html"),
        selector_counts={"#review-feed article": 3},
    )


@pytest.fixture
def shipping_fee_html():
    return load_fixture("shipping_fee.html")

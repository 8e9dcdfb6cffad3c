"""Flask API for the marketscrape package."""

"""HTTP tool server for the OLX scraping engine."""

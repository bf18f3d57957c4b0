"""Flight tracker: aircraft, route and weather change publisher."""

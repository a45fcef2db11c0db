"""Roster domain: dates, duty spans, pharmacies and the static catalog."""

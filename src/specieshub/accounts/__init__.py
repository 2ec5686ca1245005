"""Accounts domain package: signed-in users who author species records."""

"""Failures absorbed by the fetch scheduler."""

from __future__ import annotations


class FetchError(Exception):
    """Base class for a failed fetch cycle."""


class NetworkFailure(FetchError):
    """The record or list request did not complete successfully."""


class ContentParseFailure(FetchError):
    """The fetched text could not be turned into a record."""

# Overview: JSON encoding for Decimal amounts and ISO dates in API responses.

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

from flask.json.provider import DefaultJSONProvider

from .money import as_json_number
from backoffice.time_utils import to_iso


class BackofficeJSONProvider(DefaultJSONProvider):
    """
    Amounts go out as JSON numbers, dates and times as ISO-8601 strings.

    Flask's default emits Decimal as a string and dates in HTTP format.
    """

    @staticmethod
    def default(o):
        if isinstance(o, Decimal):
            return as_json_number(o)
        if isinstance(o, (datetime, date, time)):
            return to_iso(o)
        return DefaultJSONProvider.default(o)

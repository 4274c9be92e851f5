"""
Structured lodging record produced by the confirmation text parser.
"""

import json
from dataclasses import dataclass, fields
from typing import Optional

# Attribute name -> JSON field name
JSON_FIELD_NAMES = {
    'hotel_name': 'hotelName',
    'guest_name': 'guestName',
    'check_in_date': 'checkInDate',
    'check_out_date': 'checkOutDate',
    'rooms': 'rooms',
    'free_cancel_by': 'freeCancelBy',
    'breakfast_included': 'breakfastIncluded',
    'total_cost': 'totalCost',
    'currency': 'currency',
    'paid': 'paid',
    'address': 'address',
    'phone': 'phone',
}


@dataclass
class ParsedLodging:
    """Lodging fields found in one confirmation.

    Every text field is optional: None means "not found", never an error.
    Dates are ISO strings (YYYY-MM-DD) and total_cost is a fixed
    2-decimal numeral.
    """
    hotel_name: Optional[str] = None
    guest_name: Optional[str] = None
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    rooms: Optional[str] = None
    free_cancel_by: Optional[str] = None
    breakfast_included: bool = False
    total_cost: Optional[str] = None
    currency: Optional[str] = None
    paid: bool = False
    address: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self):
        """Return the JSON form, omitting fields that were not found."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[JSON_FIELD_NAMES[f.name]] = value
        return data

    def to_json(self, indent=2):
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


"""Reservation pricing and discount resolution.

Typical use::

    from danjam.pricing.selector import RoomPricing

    session = RoomPricing(offer, stay, settings.events, settings.coupons, wallet, today=today)
    result = session.current()
"""

"""Booking services: wallet store, coupon consumption and booking orchestration."""

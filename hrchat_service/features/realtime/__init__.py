"""Realtime feature: WebSocket event stream and fan-out admin endpoints."""

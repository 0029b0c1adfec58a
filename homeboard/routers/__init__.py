"""
Routers module - API endpoint handlers organized by feature.

Each router handles a specific part of the API:
- admin: Admin login (session token for the authorization routes)
- calendar_auth: One-time Google consent (/authorize, /callback)
- calendar_events: Event data for the dashboard (/events, /events/week, /events/month)
"""

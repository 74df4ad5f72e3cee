"""
API Routers - Organized endpoint handlers for the EduShelf API.

Each router handles a specific domain:
- feed: Listings visible to a browsing student
- requests: Sending, listing and deciding exchange requests
"""

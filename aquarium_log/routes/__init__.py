"""
Aquarium Log Backend: API Routes Package
==========================================

Route Inventory (all under /api/v1 except health):
    - aquariums.py:       /aquariums, /aquariums/search, /aquariums/nearby,
                          photo management and og_image
    - rankings.py:        /rankings/<leaderboard>
    - visits.py:          /visits CRUD and media upload
    - wishlist_items.py:  /wishlist_items CRUD
    - users.py:           /users/{id} profile, visits, wishlist, avatar
    - sessions.py:        /register, /login, /logout, /me
    - files.py:           /files/{path} (stored attachments)
    - health.py:          /health

Routes stay thin: parse the request, call a service, return its result.
"""

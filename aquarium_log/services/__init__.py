"""
Aquarium Log Backend: Services Layer
======================================

What:  Business logic between routes (HTTP) and the database.
How:   Services receive the AsyncSession and the current user explicitly
       and return response schemas or ORM rows; they never touch the
       request object.

Service Inventory:
    - aquarium_query:   listing/search/nearby query composer
    - ranking_service:  the five leaderboards
    - aquarium_service: aquarium CRUD and photo management
    - visit_service:    visit CRUD, filters and media caps
    - wishlist_service: caller-scoped wishlist CRUD
    - user_service:     profiles, favourites and avatars
    - auth_service:     registration, login and password hashing
    - file_service:     upload validation, storage and cleanup
    - og_image_fetcher: best-effort Open Graph image lookup
    - geo, pagination:  shared helpers
"""

# Services package init
"""
CritterTrack Backend — Services Layer
=====================================

Business rules between the routes (HTTP) and the credential store.

Service Inventory:
    - TokenService:     issue / verify HS256 JWTs
    - PasswordHasher:   bcrypt, off the event loop
    - AuthGate:         bearer token → Identity, or 401
    - AccountService:   register, login, current user, profile, user search
    - AnimalService:    owner-scoped animal CRUD, public redacted views
    - LitterService:    owner-scoped litter CRUD
    - FileService:      image upload validation and storage

Each service is constructed once in create_app() with its collaborators
and settings passed in explicitly.
"""

# Services package init
"""
FamilyEvents Backend — Services Layer
=====================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   One stateless class per resource with a module-level singleton. Every
       method receives the request's AsyncSession and the caller's Identity
       explicitly, and only flushes; the session dependency commits.

Service Inventory:
    - access_control:        Permission decisions for families and events
    - AuthService:           Bearer token signing/verification, demo sign-in
    - FamilyService:         Families and family membership
    - EventService:          Events
    - MediaService:          Event media (metadata and uploads)
    - FileService:           Upload validation, storage, serving, cleanup
    - CommentService:        Threaded event comments
    - ContributorService:    Per-event contributor grants
    - PrivacyService:        Per-user event privacy overrides
    - NotificationService:   The caller's notifications
    - ProfileService:        The caller's own user record
"""

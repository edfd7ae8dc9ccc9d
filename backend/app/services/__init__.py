# Services package init
"""
East Village Everything — Services Layer
==========================================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - TagService:      tag CRUD, hierarchy and has_children maintenance, bulk save
    - PlaceService:    place CRUD, field normalization, tag associations
    - UserService:     admin accounts and credential checks
    - plan_update:     turns a partial-update payload into SET assignments
    - structure_tags:  groups a flat tag list into parents/standalone
    - text:            phone and line-break normalization helpers

Every service method takes the caller's AsyncSession and never commits;
the request (or session_scope) owns the transaction.
"""

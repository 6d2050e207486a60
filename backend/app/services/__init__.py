# Services package init
"""
Coleta Backend — Services Layer
=================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services receive the request's AsyncSession as an argument and hold no
       per-request state, so one module-level instance of each is shared.

Service Inventory:
    - AuthService:        login, profile read/update
    - MaterialService:    catalog listing, id-or-name material resolver
    - WeighingService:    weighing history, creation, device lazy-creation
    - LeaderboardService: per-cooperative top collectors
    - units:              grams ↔ kilograms conversion (Decimal)
"""

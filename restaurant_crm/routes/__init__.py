# Routes package init
"""
Restaurant CRM Backend - API Routes Package
============================================

Route Inventory:
    - customers.py:  /api/customers...        (customer CRUD, authenticated)
    - health.py:     GET /health, GET /info    (probes, open)
    - console.py:    GET /db-console/          (development only, open)

Routes stay thin: extract request data, call a service, return the
result. Failures propagate to the error hook in restaurant_crm.errors.
"""

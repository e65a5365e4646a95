# Services package init
"""
Restaurant CRM Backend - Services Layer
========================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - CustomerService: customer CRUD and visit recording

Services receive the request's AsyncSession, raise domain exceptions
(restaurant_crm.exceptions) and let storage errors propagate; they never
build HTTP responses.
"""

"""
CaseDesk Backend — API Routes Package
=======================================

Route Inventory:
    - custom_fields.py: GET/POST   /api/cases/custom-fields
                        DELETE     /api/cases/custom-fields/{id}
    - cases.py:         GET/POST   /api/cases
                        GET/PUT/DELETE /api/cases/{id}
    - health.py:        GET        /health

Routes are THIN: extract request data, call the service, wrap the result in
the success envelope. Business rules live in services.
"""

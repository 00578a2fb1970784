"""
CaseDesk Backend — Services Layer
===================================

Service Inventory:
    - CaseService: case validation, filtering/search/pagination, CRUD
    - CustomFieldService: custom field definition list/create/delete

Services are stateless apart from their policy settings and receive an
AsyncSession per call, so they can be unit-tested with a mocked session.
"""

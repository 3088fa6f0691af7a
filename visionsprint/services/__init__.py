"""Service layer: business rules over the ORM models"""

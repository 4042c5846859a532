"""Portal application for the Medflow backend.

This package contains models, serializers, services, views and route
registrations implementing the API used by the patient, doctor,
reception agent and admin front-ends.
"""

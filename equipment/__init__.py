"""Equipment application for the DiaCare backend.

This package contains the models, maintenance services, views and route
registrations behind the dialysis unit's equipment dashboards.
"""

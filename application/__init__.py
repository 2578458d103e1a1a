"""
Application Layer for workout tracking.

This package contains:
- ports/: Abstract repository interfaces (what the domain needs)
- services/: TrackingService and the pure statistics it uses
- handlers/: Handlers for events raised by other modules
- dtos.py: Plain dataclasses returned to callers
- errors.py: Rendering of domain errors for boundary code
"""

"""
agency_modules -- Business modules of the agency back-end.

Each module owns its frozen domain models (``models``), pure rules, ORM
persistence (``orm``) and a service class (``service``).
"""

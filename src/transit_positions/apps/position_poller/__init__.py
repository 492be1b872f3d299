"""Vehicle position poller service.

Poll the SEPTA TransitView feed on a fixed interval and persist every
all-routes snapshot to a database (PostgreSQL/PostGIS or SQLite via
SQLAlchemy), one transaction per snapshot.
"""

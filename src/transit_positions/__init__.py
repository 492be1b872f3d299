"""Record SEPTA TransitView vehicle positions into a relational store."""

"""Dialogue management: orchestration engine, routers, nodes and graph wiring."""
